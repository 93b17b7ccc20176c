"""
HTTP client for the chat server API.

Implements every client-side collaborator contract on top of one
httpx.AsyncClient.
"""

from __future__ import annotations

import base64
from typing import Any, AsyncIterator, Optional

import httpx

from chatclone.core.config import get_settings
from chatclone.core.logger import setup_logger
from chatclone.interfaces.chat_services import (
    ICodeReviewService,
    ICompletionService,
    IFileDescriptionService,
    IMemoryService,
    ITitleService,
    ITranscriptionService,
    IUploadService,
)
from chatclone.models.chat import ChatTurn, CompletionRequest, Upload
from chatclone.models.chat_record import ChatRecord, ChatRecordCreate, ChatRecordUpdate
from chatclone.models.file import FileDescription
from chatclone.models.memory import MemorySnippet

logger = setup_logger(__name__)


async def _iter_body(response: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()


def _parse_snippets(payload: Any) -> list[MemorySnippet]:
    """Parse memory search output, treating anything but a list as empty."""
    if not isinstance(payload, list):
        logger.warning(f"Unexpected memory search response: {type(payload).__name__}")
        return []
    snippets = []
    for item in payload:
        if isinstance(item, dict) and isinstance(item.get("memory"), str):
            snippets.append(
                MemorySnippet(
                    id=str(item.get("id", "")),
                    memory=item["memory"],
                    score=float(item.get("score") or 0.0),
                )
            )
    return snippets


class ChatApiClient(
    ICompletionService,
    ITitleService,
    ICodeReviewService,
    IFileDescriptionService,
    IMemoryService,
    ITranscriptionService,
    IUploadService,
):
    """Async client for the chat server."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Server URL (default: API_BASE_URL)
            token: Bearer token sent with every request
            timeout: Request timeout in seconds (default: CLIENT_TIMEOUT_SECONDS)
            transport: Optional httpx transport (used by tests)
        """
        settings = get_settings()
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.CLIENT_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, user_id: Optional[str] = None) -> dict[str, str]:
        # Mock auth accepts the user ID as the bearer token.
        token = self._token or user_id
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _post_json(self, path: str, payload: dict, user_id: Optional[str] = None) -> Any:
        response = await self._client.post(path, json=payload, headers=self._headers(user_id))
        response.raise_for_status()
        return response.json()

    async def _open_stream(self, path: str, payload: dict) -> AsyncIterator[bytes]:
        request = self._client.build_request("POST", path, json=payload, headers=self._headers())
        response = await self._client.send(request, stream=True)
        if response.is_error:
            await response.aread()
            await response.aclose()
            response.raise_for_status()
        return _iter_body(response)

    # ===========================================
    # Streaming services
    # ===========================================

    async def open_completion_stream(self, request: CompletionRequest) -> AsyncIterator[bytes]:
        return await self._open_stream("/api/chat", request.model_dump(mode="json", exclude_none=True))

    async def open_title_stream(self, turns: list[ChatTurn]) -> AsyncIterator[bytes]:
        payload = {"messages": [t.model_dump(mode="json") for t in turns]}
        return await self._open_stream("/api/chat/title", payload)

    async def open_code_review_stream(self, code: str, language: str) -> AsyncIterator[bytes]:
        return await self._open_stream("/api/chat/code", {"code": code, "language": language})

    # ===========================================
    # Request/response services
    # ===========================================

    async def describe(self, url: str, mime_type: str) -> str:
        data = await self._post_json("/api/files/describe", {"url": url, "mime_type": mime_type})
        return FileDescription.model_validate(data).content

    async def recall(self, query: str, user_id: str) -> list[MemorySnippet]:
        data = await self._post_json("/api/memory/search", {"query": query}, user_id=user_id)
        return _parse_snippets(data)

    async def remember(self, turns: list[ChatTurn], user_id: str) -> None:
        payload = {"interaction": [t.model_dump(mode="json") for t in turns]}
        data = await self._post_json("/api/memory", payload, user_id=user_id)
        logger.debug(f"Memory write stored {len(data) if isinstance(data, list) else 0} entries")

    async def transcribe(self, audio: bytes, mime_type: str = "audio/webm", language: Optional[str] = None) -> str:
        payload = {
            "audio_base64": base64.b64encode(audio).decode("ascii"),
            "audio_mime_type": mime_type,
            "audio_language": language,
        }
        data = await self._post_json("/api/chat/transcribe", payload)
        return data.get("text", "") if isinstance(data, dict) else ""

    async def upload(self, data: bytes, name: str, mime_type: Optional[str] = None) -> Upload:
        payload = {
            "data_base64": base64.b64encode(data).decode("ascii"),
            "name": name,
            "mime_type": mime_type,
        }
        return Upload.model_validate(await self._post_json("/api/files", payload))

    async def delete(self, uuid: str) -> None:
        response = await self._client.delete(f"/api/files/{uuid}", headers=self._headers())
        response.raise_for_status()

    # ===========================================
    # Chat records
    # ===========================================

    async def list_chats(self) -> list[ChatRecord]:
        response = await self._client.get("/api/chats", headers=self._headers())
        response.raise_for_status()
        return [ChatRecord.model_validate(item) for item in response.json()]

    async def create_chat(self, record: ChatRecordCreate) -> ChatRecord:
        return ChatRecord.model_validate(
            await self._post_json("/api/chats", record.model_dump(mode="json"))
        )

    async def update_chat(self, record_id: str, update: ChatRecordUpdate) -> ChatRecord:
        response = await self._client.put(
            f"/api/chats/{record_id}",
            json=update.model_dump(mode="json"),
            headers=self._headers(),
        )
        response.raise_for_status()
        return ChatRecord.model_validate(response.json())

    async def delete_chat(self, record_id: str) -> None:
        response = await self._client.delete(f"/api/chats/{record_id}", headers=self._headers())
        response.raise_for_status()
