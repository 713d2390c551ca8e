"""
常量定义

定义客户端与协议层使用的各种常量。
"""

from pathlib import Path

# 网络配置
DEFAULT_SERVER_URL = "ws://127.0.0.1:8080"
ROOM_PATH = "/rooms/{room}"
CONNECT_TIMEOUT = 5.0  # 秒
MAX_FRAME_LEN = 500  # 服务器会忽略超过该长度的帧（字节）

# 本地存储
DEFAULT_STORAGE_PATH = Path.home() / ".wordrooms" / "storage.json"

# 输入限制
MAX_USERNAME_LEN = 20
MAX_CHAT_LEN = 250
MAX_GUESS_LEN = 35

# 游戏配置
MIN_PLAYERS = 2  # 倒计时/提前开始所需的最少准备人数

# Word Bomb 追踪的 24 个字母（不含 x、z），全部用过一次后清空重来
TRACKED_LETTERS = frozenset("abcdefghijklmnopqrstuvwy")

# 游戏模式
GAME_WORD_BOMB = "WordBomb"
GAME_ANAGRAMS = "Anagrams"
GAME_MODES = (GAME_WORD_BOMB, GAME_ANAGRAMS)

# 服务器 -> 客户端 消息类型
MSG_INFO = "Info"
MSG_ERROR = "Error"
MSG_ROOM_SETTINGS = "RoomSettings"
MSG_CHAT = "ChatMessage"
MSG_CONNECTION_UPDATE = "ConnectionUpdate"
MSG_READY_PLAYERS = "ReadyPlayers"
MSG_STARTING_COUNTDOWN = "StartingCountdown"
MSG_GAME_STARTED = "GameStarted"
MSG_GAME_ENDED = "GameEnded"
MSG_WORD_BOMB_INPUT = "WordBombInput"
MSG_WORD_BOMB_INVALID_GUESS = "WordBombInvalidGuess"
MSG_WORD_BOMB_PROMPT = "WordBombPrompt"
MSG_ANAGRAMS_INVALID_GUESS = "AnagramsInvalidGuess"
MSG_ANAGRAMS_CORRECT_GUESS = "AnagramsCorrectGuess"
MSG_ANAGRAMS_PROMPT = "AnagramsPrompt"
MSG_PRACTICE_SET = "PracticeSet"
MSG_PRACTICE_RESULT = "PracticeResult"

# 本地事件：通道关闭（不在线路上传输）
MSG_CLOSED = "Closed"

SERVER_MESSAGE_TYPES = (
    MSG_INFO,
    MSG_ERROR,
    MSG_ROOM_SETTINGS,
    MSG_CHAT,
    MSG_CONNECTION_UPDATE,
    MSG_READY_PLAYERS,
    MSG_STARTING_COUNTDOWN,
    MSG_GAME_STARTED,
    MSG_GAME_ENDED,
    MSG_WORD_BOMB_INPUT,
    MSG_WORD_BOMB_INVALID_GUESS,
    MSG_WORD_BOMB_PROMPT,
    MSG_ANAGRAMS_INVALID_GUESS,
    MSG_ANAGRAMS_CORRECT_GUESS,
    MSG_ANAGRAMS_PROMPT,
    MSG_PRACTICE_SET,
    MSG_PRACTICE_RESULT,
)
