"""
Unit tests for ConversationStore.
"""

import logging

import pytest

from chatclone.models.chat import DEFAULT_THREAD_TITLE, Message, Thread, Upload
from chatclone.models.enums import MessageRole
from chatclone.services.conversation_store import ConversationStore, derive_title


def test_derive_title_truncates_and_collapses_whitespace():
    assert derive_title("Hi") == "Hi"
    assert derive_title("  hello \n  world ") == "hello world"
    long_text = "a" * 45
    assert derive_title(long_text) == "a" * 30 + "..."


def test_derive_title_ignores_attachment_block():
    content = "<uploaded_content>\nUploaded file 1: notes\n</uploaded_content>\nSummarize this"
    assert derive_title(content) == "Summarize this"


@pytest.mark.asyncio
async def test_create_thread_becomes_active_at_front(store, tasks):
    first = store.create_thread()
    second = store.create_thread()

    assert store.active_id == second
    assert [t.id for t in store.threads] == [second, first]
    assert store.active_thread.title == DEFAULT_THREAD_TITLE
    await tasks.drain()


@pytest.mark.asyncio
async def test_create_thread_attaches_remote_id_without_changing_local_id(store, backend, tasks):
    thread_id = store.create_thread()

    await tasks.drain()

    thread = store.get_thread(thread_id)
    assert thread.id == thread_id
    assert thread.remote_id == "remote-1"
    assert store.active_id == thread_id
    assert backend.created == [thread_id]


@pytest.mark.asyncio
async def test_create_thread_without_remote_id_is_saved(store, backend, tasks):
    backend.issue_ids = False

    thread_id = store.create_thread()
    await tasks.drain()

    assert store.get_thread(thread_id).remote_id is None
    assert thread_id in backend.threads


@pytest.mark.asyncio
async def test_create_thread_reuses_empty_thread(store, tasks):
    used = store.create_thread()
    store.append_message("Hello", MessageRole.USER)
    empty = store.create_thread()
    store.select_thread(used)

    reused = store.create_thread(reuse_empty=True)

    assert reused == empty
    assert store.active_id == empty
    assert len(store.threads) == 2
    await tasks.drain()


@pytest.mark.asyncio
async def test_append_without_active_thread_is_noop(store):
    message_id = store.append_message("Hello", MessageRole.USER)

    assert message_id == ""
    assert store.threads == ()


@pytest.mark.asyncio
async def test_first_user_message_sets_title(store, tasks):
    store.create_thread()

    store.append_message("What is the capital of France and why?", MessageRole.USER)
    store.append_message("Paris.", MessageRole.ASSISTANT)
    store.append_message("Another question", MessageRole.USER)

    assert store.active_thread.title == "What is the capital of France ..."
    await tasks.drain()


@pytest.mark.asyncio
async def test_title_not_overwritten_once_changed(store, tasks):
    thread_id = store.create_thread()
    store.update_thread_title(thread_id, "Custom")

    store.append_message("Hello", MessageRole.USER)

    assert store.active_thread.title == "Custom"
    await tasks.drain()


@pytest.mark.asyncio
async def test_append_records_uploads_and_replaces_thread(store, tasks):
    store.create_thread()
    before = store.active_thread
    upload = Upload(url="http://x/a.png", mime_type="image/png", uuid="a", name="a.png")

    store.append_message("look", MessageRole.USER, [upload])

    after = store.active_thread
    assert before.messages == []
    assert after is not before
    assert after.messages[0].uploads == [upload]
    assert after.updated_at >= before.updated_at
    await tasks.drain()


@pytest.mark.asyncio
async def test_update_message_content_searches_all_threads(store, tasks):
    first = store.create_thread()
    message_id = store.append_message("", MessageRole.ASSISTANT)
    store.create_thread()

    assert store.update_message_content(message_id, "late reply") is True
    assert store.get_thread(first).messages[0].content == "late reply"
    assert store.update_message_content("missing", "x") is False
    await tasks.drain()


@pytest.mark.asyncio
async def test_select_unknown_thread_is_noop(store, tasks):
    thread_id = store.create_thread()

    store.select_thread("does-not-exist")

    assert store.active_id == thread_id
    await tasks.drain()


@pytest.mark.asyncio
async def test_delete_active_thread_selects_first_remaining(store, backend, tasks):
    older = store.create_thread()
    newer = store.create_thread()
    await tasks.drain()

    store.delete_thread(newer)
    await tasks.drain()

    assert store.active_id == older
    assert [t.id for t in store.threads] == [older]
    assert backend.deleted == [newer]


@pytest.mark.asyncio
async def test_delete_last_thread_clears_active(store, tasks):
    thread_id = store.create_thread()

    store.delete_thread(thread_id)
    await tasks.drain()

    assert store.active_id is None
    assert store.threads == ()


@pytest.mark.asyncio
async def test_truncate_messages(store, tasks):
    thread_id = store.create_thread()
    for text in ("one", "two", "three"):
        store.append_message(text, MessageRole.USER)

    store.truncate_messages(thread_id, 1)

    assert [m.content for m in store.get_thread(thread_id).messages] == ["one"]
    await tasks.drain()


@pytest.mark.asyncio
async def test_find_message_returns_thread_and_index(store, tasks):
    store.create_thread()
    store.append_message("q", MessageRole.USER)
    answer = store.append_message("a", MessageRole.ASSISTANT)

    thread, index = store.find_message(answer)

    assert thread.id == store.active_id
    assert index == 1
    assert store.find_message("nope") is None
    await tasks.drain()


@pytest.mark.asyncio
async def test_search_matches_title_and_content(store, tasks):
    a = store.create_thread()
    store.append_message("Tell me about Python", MessageRole.USER)
    b = store.create_thread()
    store.append_message("Hello", MessageRole.USER)
    store.append_message("Rust ownership explained", MessageRole.ASSISTANT)

    assert [t.id for t in store.search("python")] == [a]
    assert [t.id for t in store.search("RUST")] == [b]
    assert store.search("zebra") == []
    assert len(store.search("  ")) == 2
    await tasks.drain()


@pytest.mark.asyncio
async def test_saves_are_coalesced_to_latest_state(store, backend, tasks):
    thread_id = store.create_thread()
    for i in range(5):
        store.append_message(f"message {i}", MessageRole.USER)

    await tasks.drain()

    saved = backend.threads[thread_id]
    assert saved == store.get_thread(thread_id)
    assert len(saved.messages) == 5
    assert saved.remote_id == "remote-1"
    assert len(backend.updates) < 5


@pytest.mark.asyncio
async def test_persistence_failure_keeps_local_state(store, backend, tasks, caplog):
    backend.fail = True
    caplog.set_level(logging.WARNING)

    thread_id = store.create_thread()
    store.append_message("still here", MessageRole.USER)
    await tasks.drain()

    thread = store.get_thread(thread_id)
    assert thread.messages[0].content == "still here"
    assert thread.remote_id is None
    assert "Failed to create thread" in caplog.text
    assert "Failed to save thread" in caplog.text


@pytest.mark.asyncio
async def test_load_activates_newest_thread(backend, tasks):
    older = Thread(title="Older", messages=[Message(role=MessageRole.USER, content="a")])
    newer = Thread(title="Newer")
    newer = newer.model_copy(update={"created_at": older.created_at.replace(year=older.created_at.year + 1)})
    backend.threads = {older.id: older, newer.id: newer}
    store = ConversationStore(backend, tasks)

    await store.load()

    assert [t.title for t in store.threads] == ["Newer", "Older"]
    assert store.active_id == newer.id


@pytest.mark.asyncio
async def test_load_failure_starts_empty(backend, tasks):
    async def broken_load():
        raise RuntimeError("offline")

    backend.load = broken_load
    store = ConversationStore(backend, tasks)

    await store.load()

    assert store.threads == ()
    assert store.active_id is None


@pytest.mark.asyncio
async def test_listeners_are_notified_and_can_unsubscribe(store, tasks):
    calls = []
    unsubscribe = store.subscribe(lambda: calls.append(store.active_id))

    thread_id = store.create_thread()
    unsubscribe()
    store.append_message("x", MessageRole.USER)

    assert calls == [thread_id]
    await tasks.drain()


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others(store, tasks):
    def broken():
        raise ValueError("boom")

    calls = []
    store.subscribe(broken)
    store.subscribe(lambda: calls.append(1))

    store.create_thread()

    assert calls == [1]
    await tasks.drain()
