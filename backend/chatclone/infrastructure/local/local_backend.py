"""
Local JSON-file persistence backend for anonymous sessions.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from chatclone.core.config import get_settings
from chatclone.core.logger import setup_logger
from chatclone.interfaces.persistence_backend import IPersistenceBackend
from chatclone.models.chat import Thread

logger = setup_logger(__name__)

STORE_KEY = "local_chats"


class LocalBackend(IPersistenceBackend):
    """
    Stores every thread in a single JSON document.

    The document is rewritten on each change; threads are keyed by their
    local id, so create() never issues a remote id.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path or get_settings().LOCAL_STORE_PATH)
        self._threads: Optional[dict[str, Thread]] = None
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, Thread]:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            raw_threads = document.get(STORE_KEY, [])
            threads = [Thread.model_validate(item) for item in raw_threads]
        except (OSError, ValueError, AttributeError, PydanticValidationError) as e:
            logger.error(f"Failed to read local chats from {self._path}: {e}")
            return {}
        return {thread.id: thread for thread in threads}

    def _write(self, document: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self._path)

    async def _ensure_loaded(self) -> dict[str, Thread]:
        if self._threads is None:
            self._threads = await asyncio.to_thread(self._read)
        return self._threads

    async def _flush(self) -> None:
        # Serialized on the loop; only the disk write runs in a worker thread.
        ordered = sorted(self._threads.values(), key=lambda t: t.created_at, reverse=True)
        document = {STORE_KEY: [t.model_dump(mode="json") for t in ordered]}
        await asyncio.to_thread(self._write, document)

    async def load(self) -> list[Thread]:
        async with self._lock:
            threads = await self._ensure_loaded()
            return sorted(threads.values(), key=lambda t: t.created_at, reverse=True)

    async def create(self, thread: Thread) -> Optional[str]:
        await self.update(thread)
        return None

    async def update(self, thread: Thread) -> None:
        async with self._lock:
            (await self._ensure_loaded())[thread.id] = thread
            await self._flush()

    async def delete(self, thread: Thread) -> None:
        async with self._lock:
            if (await self._ensure_loaded()).pop(thread.id, None) is not None:
                await self._flush()
