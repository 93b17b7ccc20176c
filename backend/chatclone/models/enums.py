"""
Enum definitions shared across the application.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageType(str, Enum):
    """How a message body should be rendered."""

    CHAT = "chat"
    CODE = "code"  # Submitted from the code editor, rendered as fenced code


class SubmissionState(str, Enum):
    """Phase of the submission pipeline."""

    IDLE = "idle"
    ATTACHMENT_PROCESSING = "attachment_processing"
    MEMORY_RECALL = "memory_recall"
    STREAMING = "streaming"
    POST_PROCESSING = "post_processing"


class FileKind(str, Enum):
    """Kind of description produced for an uploaded file."""

    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"
    FILE = "file"
