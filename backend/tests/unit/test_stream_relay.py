"""
Unit tests for the message stream relay.
"""

import asyncio

import pytest

from chatclone.services.stream_relay import relay_stream


async def _chunks(*items):
    for item in items:
        yield item


@pytest.mark.asyncio
async def test_relay_reports_cumulative_text():
    seen = []

    result = await relay_stream(_chunks(b"Hel", b"lo, ", b"world"), seen.append)

    assert seen == ["Hel", "Hello, ", "Hello, world"]
    assert result == "Hello, world"


@pytest.mark.asyncio
async def test_relay_decodes_multibyte_split_across_chunks():
    encoded = "héllo 世界".encode("utf-8")
    # Split inside both the two-byte "é" and the three-byte "世".
    split_e = encoded.index("é".encode("utf-8")) + 1
    split_cjk = encoded.index("世".encode("utf-8")) + 2
    chunks = [encoded[:split_e], encoded[split_e:split_cjk], encoded[split_cjk:]]
    seen = []

    result = await relay_stream(_chunks(*chunks), seen.append)

    assert result == "héllo 世界"
    assert "�" not in "".join(seen)
    assert all(later.startswith(earlier) for earlier, later in zip(seen, seen[1:]))


@pytest.mark.asyncio
async def test_relay_skips_empty_pieces():
    seen = []
    # The first chunk is an incomplete multi-byte sequence.
    euro = "€".encode("utf-8")

    await relay_stream(_chunks(euro[:1], euro[1:], b""), seen.append)

    assert seen == ["€"]


@pytest.mark.asyncio
async def test_relay_keeps_partial_text_on_read_error():
    async def failing():
        yield b"partial"
        raise ConnectionError("connection reset")

    seen = []

    result = await relay_stream(failing(), seen.append)

    assert result == "partial"
    assert seen == ["partial"]


@pytest.mark.asyncio
async def test_relay_propagates_cancellation():
    started = asyncio.Event()

    async def slow():
        yield b"a"
        started.set()
        await asyncio.sleep(10)
        yield b"b"

    task = asyncio.create_task(relay_stream(slow(), lambda _: None))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
