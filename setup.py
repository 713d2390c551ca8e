# setup.py - word-rooms 客户端会话引擎

from setuptools import setup, find_packages

setup(
    name="word-rooms",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "websockets>=13.0",
    ],
    extras_require={
        "dev": [
            "black>=23.9.1",
            "flake8>=6.1.0",
            "isort>=5.12.0",
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pre-commit>=3.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "wordrooms-client=wordrooms.client.main:main",
        ],
    },
)
