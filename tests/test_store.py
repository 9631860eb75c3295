import pytest

from lobbychat.constants import Role
from lobbychat.errors import StorageError
from lobbychat.store import MessageStore


@pytest.mark.asyncio
async def test_append_returns_timestamp_as_id(store):
    message_id = await store.append("ABCDEF", "Alice", Role.USER, "hello", 1000)
    assert message_id == 1000


@pytest.mark.asyncio
async def test_list_is_ordered_by_creation_time(store):
    await store.append("ABCDEF", "Alice", Role.USER, "second", 2000)
    await store.append("ABCDEF", "Bob", Role.USER, "first", 1000)
    await store.append("ABCDEF", "DM", Role.ASSISTANT, "third", 3000)
    messages = await store.list_by_lobby("ABCDEF")
    assert [m.content for m in messages] == ["first", "second", "third"]
    assert messages[2].role is Role.ASSISTANT
    assert messages[0].to_dict() == {
        "id": 1000,
        "lobbyCode": "ABCDEF",
        "sender": "Bob",
        "role": "user",
        "content": "first",
        "createdAt": 1000,
    }


@pytest.mark.asyncio
async def test_timestamp_ties_keep_arrival_order(store):
    await store.append("ABCDEF", "Alice", Role.USER, "one", 1000)
    await store.append("ABCDEF", "DM", Role.ASSISTANT, "two", 1000)
    messages = await store.list_by_lobby("ABCDEF")
    assert [m.content for m in messages] == ["one", "two"]


@pytest.mark.asyncio
async def test_lobbies_are_isolated(store):
    await store.append("ABCDEF", "Alice", Role.USER, "hi", 1000)
    await store.append("GHJKLM", "Bob", Role.USER, "yo", 1001)
    assert [m.sender for m in await store.list_by_lobby("GHJKLM")] == ["Bob"]
    assert await store.list_by_lobby("UNKNWN") == []


@pytest.mark.asyncio
async def test_closed_store_raises_storage_error():
    store = MessageStore()
    with pytest.raises(StorageError):
        await store.append("ABCDEF", "Alice", Role.USER, "hello", 1000)
    with pytest.raises(StorageError):
        await store.list_by_lobby("ABCDEF")


def test_messages_survive_reopen(tmp_path):
    path = tmp_path / "nested" / "lobby.db"
    store = MessageStore(str(path))
    store.open()
    store.append_sync("ABCDEF", "Alice", Role.USER, "persisted", 1000)
    store.close()
    assert path.exists()

    reopened = MessageStore(str(path))
    reopened.open()
    try:
        assert [m.content for m in reopened.list_by_lobby_sync("ABCDEF")] == ["persisted"]
    finally:
        reopened.close()


def test_open_is_idempotent(store):
    store.open()
    assert store.is_open
