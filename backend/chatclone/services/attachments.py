"""
Attachment block formatting.

Attachment descriptions are injected into the user message between
sentinel tags so the model sees them ahead of the typed text.
"""

from __future__ import annotations

from typing import Sequence, Union

from chatclone.core.logger import setup_logger
from chatclone.models.chat import Upload

logger = setup_logger(__name__)

BLOCK_START = "<uploaded_content>"
BLOCK_END = "</uploaded_content>"


def build_attachment_block(
    uploads: Sequence[Upload],
    results: Sequence[Union[str, BaseException]],
) -> str:
    """
    Format successful attachment descriptions.

    Images and other files are numbered separately, in encounter order,
    counting only successful descriptions. Failed entries are logged and
    skipped. Returns "" when nothing succeeded.
    """
    lines = []
    image_count = 0
    file_count = 0
    for upload, result in zip(uploads, results):
        if isinstance(result, BaseException):
            logger.warning(f"Failed to describe attachment {upload.name or upload.url}: {result}")
            continue
        if upload.is_image:
            image_count += 1
            lines.append(f"Uploaded image {image_count}: {result}\n")
        else:
            file_count += 1
            lines.append(f"Uploaded file {file_count}: {result}\n")

    if not lines:
        return ""
    return f"{BLOCK_START}\n{''.join(lines)}{BLOCK_END}\n"


def strip_attachment_block(content: str) -> str:
    """Return the typed text of a user message without its attachment block."""
    if content.startswith(BLOCK_START):
        end = content.find(BLOCK_END)
        if end != -1:
            return content[end + len(BLOCK_END):].lstrip("\n")
    return content
