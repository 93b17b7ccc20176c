"""
Unit tests for chat client session assembly.
"""

import pytest

from chatclone.core.config import Settings
from chatclone.infrastructure.local.local_backend import LocalBackend
from chatclone.infrastructure.remote.remote_backend import RemoteBackend
from chatclone.services.chat_client import create_chat_client


@pytest.fixture
def client_settings(tmp_path):
    return Settings(_env_file=None, LOCAL_STORE_PATH=str(tmp_path / "chats.json"))


@pytest.mark.asyncio
async def test_signed_in_session_uses_remote_backend(client_settings):
    session = create_chat_client(user_id="test_user", settings=client_settings)

    assert isinstance(session.backend, RemoteBackend)
    assert session.orchestrator.state.value == "idle"
    await session.aclose()


@pytest.mark.asyncio
async def test_anonymous_session_uses_local_backend(client_settings):
    session = create_chat_client(settings=client_settings)

    assert isinstance(session.backend, LocalBackend)
    await session.aclose()
