import pytest
from eventure.utils.idempotency import get_idempotent, set_idempotent

pytestmark = pytest.mark.idempotency


async def test_idemp_flow(fake_redis):
    key = "pytest-idemp"
    assert await get_idempotent(key) is None
    await set_idempotent(key, {"ok": True})
    found = await get_idempotent(key)
    assert found == {"ok": True}


async def test_idemp_keys_are_scoped(fake_redis):
    await set_idempotent("same-key", {"session_id": "a"}, scope="checkout:draft-1")

    assert await get_idempotent("same-key", scope="checkout:draft-1") == {"session_id": "a"}
    assert await get_idempotent("same-key", scope="checkout:draft-2") is None


async def test_empty_key_is_ignored(fake_redis):
    assert await get_idempotent("") is None
