"""
共享模块

存放与客户端状态无关的代码，如常量、协议定义等。

组件说明：
- constants: 服务器地址、输入长度限制、追踪字母表、消息类型常量
- protocols: 基于 JSON 的标签消息（pydantic 模型）以及 encode/decode

提示：
- 每一帧都是带 "type" 标签的 JSON 对象，网络层直接透传 encode_text() 的结果
- 线路字段名与本地字段名的转换只在 protocols 中进行
"""

from . import constants, protocols

__all__ = ["constants", "protocols"]
