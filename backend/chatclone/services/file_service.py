"""
Uploaded file handling: storage, URL reading and text descriptions.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from io import BytesIO
from pathlib import Path
from typing import Optional
from uuid import uuid4

import httpx
from pypdf import PdfReader

from chatclone.core.config import Settings, get_settings
from chatclone.core.exceptions import InfrastructureError, NotFoundError, ValidationError
from chatclone.core.logger import setup_logger
from chatclone.interfaces.llm_provider import ILLMProvider
from chatclone.interfaces.storage_provider import IStorageProvider
from chatclone.models.chat import Upload
from chatclone.models.enums import FileKind
from chatclone.models.file import FileDescription
from chatclone.services.prompts import IMAGE_DESCRIPTION_PROMPT

logger = setup_logger(__name__)

UPLOAD_PREFIX = "uploads"
_UPLOAD_KEY = re.compile(r"^[0-9a-f]{32}(\.[A-Za-z0-9]{1,10})?$")


def decode_data_url(
    raw: str,
    fallback_mime_type: str = "application/octet-stream",
) -> tuple[Optional[bytes], str]:
    """
    Decode plain base64 or a base64 data URL.

    Returns:
        (bytes or None when undecodable, mime_type)
    """
    if not raw:
        return None, fallback_mime_type

    raw = raw.strip()
    mime_type = fallback_mime_type
    encoded = raw

    if raw.startswith("data:"):
        if "," not in raw:
            return None, fallback_mime_type
        header, encoded = raw.split(",", 1)
        segments = [segment.strip() for segment in header[5:].split(";") if segment.strip()]
        if segments and "/" in segments[0]:
            mime_type = segments[0].lower()
        if not any(segment.lower() == "base64" for segment in segments[1:]):
            return None, mime_type

    try:
        return base64.b64decode(encoded, validate=False), mime_type
    except (binascii.Error, ValueError):
        return None, mime_type


def classify(mime_type: str) -> FileKind:
    mime_type = mime_type.lower()
    if mime_type.startswith("image/"):
        return FileKind.IMAGE
    if mime_type == "application/pdf":
        return FileKind.PDF
    if mime_type.startswith("text/"):
        return FileKind.TEXT
    return FileKind.FILE


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Extract the PDF text layer, page by page."""
    if not pdf_bytes:
        return ""
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
    except Exception as e:
        raise InfrastructureError(f"Failed to parse PDF: {e}")

    chunks: list[str] = []
    for page in reader.pages:
        try:
            page_text = (page.extract_text() or "").strip()
        except Exception as e:
            logger.warning(f"Skipping unreadable PDF page: {e}")
            continue
        if page_text:
            chunks.append(page_text)
    return "\n".join(chunks)


class FileService:
    """Stores uploads and describes them for the chat model."""

    def __init__(
        self,
        storage: IStorageProvider,
        llm_provider: ILLMProvider,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._storage = storage
        self._llm = llm_provider
        self._settings = settings or get_settings()
        self._http_client = http_client

    # ===========================================
    # Uploads
    # ===========================================

    async def store_upload(self, data: bytes, name: str, mime_type: Optional[str] = None) -> Upload:
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self._settings.MAX_UPLOAD_BYTES:
            raise ValidationError(f"Uploaded file exceeds {self._settings.MAX_UPLOAD_BYTES} bytes")

        mime_type = mime_type or mimetypes.guess_type(name)[0] or "application/octet-stream"
        ext = Path(name).suffix.lower() or mimetypes.guess_extension(mime_type) or ""
        if not re.fullmatch(r"\.[a-z0-9]{1,10}", ext):
            ext = ""
        key = f"{uuid4().hex}{ext}"
        path = f"{UPLOAD_PREFIX}/{key}"

        await self._storage.upload(path, data, content_type=mime_type)
        logger.info(f"Stored upload {name} ({mime_type}, {len(data)} bytes) as {key}")
        return Upload(
            url=self._storage.get_public_url(path),
            mime_type=mime_type,
            uuid=key,
            name=name,
        )

    async def delete_upload(self, key: str) -> bool:
        if not _UPLOAD_KEY.match(key):
            raise ValidationError(f"Invalid upload id: {key}")
        return await self._storage.delete(f"{UPLOAD_PREFIX}/{key}")

    # ===========================================
    # Reading
    # ===========================================

    async def read_file_bytes(self, file_url: str) -> bytes:
        """
        Read file bytes from a storage, data: or http(s) URL.

        Raises:
            NotFoundError: If the file cannot be found
            ValidationError: For any other URL scheme, local paths included
            InfrastructureError: If the file cannot be fetched
        """
        storage_prefix = f"{self._settings.BASE_URL}/storage/"
        if file_url.startswith(storage_prefix):
            return await self._storage.download(file_url[len(storage_prefix):])
        if file_url.startswith("data:"):
            data, _ = decode_data_url(file_url)
            if data is None:
                raise ValidationError("Invalid data URL")
            return data
        if not file_url.startswith(("http://", "https://")):
            raise ValidationError(f"Unsupported file URL: {file_url}")

        try:
            if self._http_client is not None:
                response = await self._http_client.get(file_url)
            else:
                async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
                    response = await client.get(file_url)
        except httpx.HTTPError as e:
            raise InfrastructureError(f"Failed to fetch file: {e}")
        if response.status_code == 404:
            raise NotFoundError(f"File not found: {file_url}")
        if response.status_code != 200:
            raise InfrastructureError(f"Failed to fetch file: HTTP {response.status_code}")
        return response.content

    # ===========================================
    # Descriptions
    # ===========================================

    def _truncate(self, text: str) -> str:
        return text[: self._settings.FILE_TEXT_MAX_CHARS]

    async def describe(self, url: str, mime_type: str) -> FileDescription:
        """
        Describe an uploaded file for the chat model.

        Images get a vision-model caption, PDFs and text files their text
        (truncated), anything else a "not supported" notice.
        """
        kind = classify(mime_type)

        if kind == FileKind.FILE:
            return FileDescription(
                type=kind,
                content=f"This file type ({mime_type}) is not supported for preview, but has been uploaded.",
            )

        data = await self.read_file_bytes(url)

        if kind == FileKind.IMAGE:
            caption = await self._llm.describe_image(
                data,
                mime_type,
                IMAGE_DESCRIPTION_PROMPT,
                max_tokens=self._settings.VISION_MAX_TOKENS,
            )
            return FileDescription(type=kind, content=caption)

        if kind == FileKind.PDF:
            return FileDescription(type=kind, content=self._truncate(extract_pdf_text(data)))

        return FileDescription(type=kind, content=self._truncate(data.decode("utf-8", errors="replace")))
