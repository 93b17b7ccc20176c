"""
Unit tests for ChatApiClient and RemoteBackend over an httpx MockTransport.
"""

import base64
import json
from datetime import datetime, timezone

import httpx
import pytest

from chatclone.infrastructure.remote.api_client import ChatApiClient, _parse_snippets
from chatclone.infrastructure.remote.remote_backend import RemoteBackend
from chatclone.models.chat import ChatTurn, CompletionRequest, Thread
from chatclone.models.enums import MessageRole

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc).isoformat()


class Recorder:
    """MockTransport handler that records requests and replies from a table."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"detail": "not found"})
        return self.routes[key](request)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def _client(recorder: Recorder, token=None) -> ChatApiClient:
    return ChatApiClient(
        base_url="http://test", token=token, timeout=5, transport=httpx.MockTransport(recorder)
    )


async def _read(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


def _record(record_id: str = "rec-1", client_id: str = "local-1", title: str = "New Chat") -> dict:
    return {
        "id": record_id,
        "user_id": "user-1",
        "client_id": client_id,
        "title": title,
        "messages": [],
        "created_at": NOW,
        "updated_at": NOW,
    }


@pytest.mark.asyncio
async def test_completion_stream_posts_request_and_yields_body():
    recorder = Recorder({("POST", "/api/chat"): lambda r: httpx.Response(200, content=b"Hello world")})
    client = _client(recorder, token="user-1")

    stream = await client.open_completion_stream(
        CompletionRequest(messages=[ChatTurn(role=MessageRole.USER, content="Hi")], memory="likes tea")
    )

    assert await _read(stream) == b"Hello world"
    assert recorder.body() == {
        "messages": [{"role": "user", "content": "Hi"}],
        "memory": "likes tea",
    }
    assert recorder.requests[0].headers["Authorization"] == "Bearer user-1"
    await client.aclose()


@pytest.mark.asyncio
async def test_stream_raises_on_http_error():
    recorder = Recorder({("POST", "/api/chat/title"): lambda r: httpx.Response(502, text="upstream")})
    client = _client(recorder)

    with pytest.raises(httpx.HTTPStatusError):
        await client.open_title_stream([ChatTurn(role=MessageRole.USER, content="Hi")])

    assert "Authorization" not in recorder.requests[0].headers
    await client.aclose()


@pytest.mark.asyncio
async def test_code_review_stream_payload():
    recorder = Recorder({("POST", "/api/chat/code"): lambda r: httpx.Response(200, content=b"ok")})
    client = _client(recorder)

    stream = await client.open_code_review_stream("print(1)", "python")

    assert await _read(stream) == b"ok"
    assert recorder.body() == {"code": "print(1)", "language": "python"}
    await client.aclose()


@pytest.mark.asyncio
async def test_describe_returns_content():
    recorder = Recorder(
        {
            ("POST", "/api/files/describe"): lambda r: httpx.Response(
                200, json={"type": "image", "content": "a red bicycle"}
            )
        }
    )
    client = _client(recorder)

    assert await client.describe("http://files/a.png", "image/png") == "a red bicycle"
    assert recorder.body() == {"url": "http://files/a.png", "mime_type": "image/png"}
    await client.aclose()


@pytest.mark.asyncio
async def test_recall_sends_user_and_parses_snippets():
    recorder = Recorder(
        {
            ("POST", "/api/memory/search"): lambda r: httpx.Response(
                200, json=[{"id": "m1", "memory": "Prefers tea", "score": 0.9}, {"bogus": True}]
            )
        }
    )
    client = _client(recorder)

    snippets = await client.recall("drinks", "user-7")

    assert [(s.id, s.memory) for s in snippets] == [("m1", "Prefers tea")]
    assert recorder.requests[0].headers["Authorization"] == "Bearer user-7"
    await client.aclose()


def test_parse_snippets_treats_non_list_as_empty():
    assert _parse_snippets({"results": []}) == []
    assert _parse_snippets(None) == []


@pytest.mark.asyncio
async def test_remember_posts_interaction():
    recorder = Recorder({("POST", "/api/memory"): lambda r: httpx.Response(201, json=[])})
    client = _client(recorder)
    turns = [
        ChatTurn(role=MessageRole.USER, content="I live in Osaka"),
        ChatTurn(role=MessageRole.ASSISTANT, content="Noted"),
    ]

    await client.remember(turns, "user-1")

    assert recorder.body()["interaction"][0] == {"role": "user", "content": "I live in Osaka"}
    await client.aclose()


@pytest.mark.asyncio
async def test_transcribe_and_upload_encode_base64():
    recorder = Recorder(
        {
            ("POST", "/api/chat/transcribe"): lambda r: httpx.Response(200, json={"text": "hello"}),
            ("POST", "/api/files"): lambda r: httpx.Response(
                201,
                json={"url": "http://test/storage/uploads/abc.txt", "mime_type": "text/plain", "uuid": "abc.txt", "name": "a.txt"},
            ),
            ("DELETE", "/api/files/abc.txt"): lambda r: httpx.Response(204),
        }
    )
    client = _client(recorder)

    assert await client.transcribe(b"RIFF", "audio/wav", "en") == "hello"
    assert base64.b64decode(recorder.body()["audio_base64"]) == b"RIFF"

    upload = await client.upload(b"notes", "a.txt", "text/plain")
    assert upload.uuid == "abc.txt"
    assert base64.b64decode(recorder.body()["data_base64"]) == b"notes"

    await client.delete(upload.uuid)
    assert recorder.requests[-1].method == "DELETE"
    await client.aclose()


@pytest.mark.asyncio
async def test_remote_backend_maps_records_to_threads():
    recorder = Recorder(
        {
            ("GET", "/api/chats"): lambda r: httpx.Response(200, json=[_record(title="Saved")]),
            ("POST", "/api/chats"): lambda r: httpx.Response(
                201, json=_record("rec-2", json.loads(r.content)["client_id"])
            ),
            ("PUT", "/api/chats/rec-2"): lambda r: httpx.Response(200, json=_record("rec-2")),
            ("DELETE", "/api/chats/rec-2"): lambda r: httpx.Response(204),
        }
    )
    client = _client(recorder, token="user-1")
    backend = RemoteBackend(client)

    loaded = await backend.load()
    assert loaded[0].id == "local-1"
    assert loaded[0].remote_id == "rec-1"
    assert loaded[0].title == "Saved"

    thread = Thread()
    remote_id = await backend.create(thread)
    assert remote_id == "rec-2"
    assert recorder.body()["client_id"] == thread.id

    await backend.update(thread.model_copy(update={"remote_id": remote_id, "title": "Renamed"}))
    assert recorder.body()["title"] == "Renamed"

    await backend.delete(thread.model_copy(update={"remote_id": remote_id}))
    assert recorder.requests[-1].method == "DELETE"
    await client.aclose()


@pytest.mark.asyncio
async def test_remote_backend_skips_threads_without_remote_id():
    recorder = Recorder({})
    client = _client(recorder)
    backend = RemoteBackend(client)

    await backend.update(Thread())
    await backend.delete(Thread())

    assert recorder.requests == []
    await client.aclose()
