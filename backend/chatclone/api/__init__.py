"""API routers."""

from chatclone.api import chat, chats, files, memory

__all__ = [
    "chat",
    "chats",
    "files",
    "memory",
]
