"""
Relay an incremental byte stream into cumulative text updates.
"""

from __future__ import annotations

import codecs
from typing import AsyncIterable, Callable

from chatclone.core.logger import setup_logger

logger = setup_logger(__name__)


async def relay_stream(
    byte_stream: AsyncIterable[bytes],
    on_chunk: Callable[[str], None],
) -> str:
    """
    Decode a UTF-8 byte stream and report the cumulative text after each piece.

    Multi-byte characters split across chunk boundaries are held back until
    complete. A read error ends the relay and keeps the partial text;
    cancellation propagates.

    Args:
        byte_stream: Response body chunks
        on_chunk: Called with the full text received so far

    Returns:
        The final cumulative text
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    text = ""
    try:
        async for chunk in byte_stream:
            piece = decoder.decode(chunk)
            if piece:
                text += piece
                on_chunk(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            text += tail
            on_chunk(text)
    except Exception as e:
        logger.error(f"Stream read failed after {len(text)} chars: {e}")
    return text
