import gc

from realtime.presence import PresenceRegistry


class Conn:
    pass


def test_register_user_returns_unique_ids(registry):
    conns = [Conn() for _ in range(50)]
    ids = [registry.register_user(c, f"u{i}", "10.0.0.1") for i, c in enumerate(conns)]

    assert len(set(ids)) == 50
    assert len(registry.list_users()) == 50
    assert {r.id for r in registry.list_users()} == set(ids)


def test_lookup_returns_record_with_connection(registry):
    conn = Conn()
    user_id = registry.register_user(conn, "alice", "203.0.113.9")

    record = registry.lookup_user(user_id)
    assert record is not None
    assert record.name == "alice"
    assert record.address == "203.0.113.9"
    assert record.connection is conn
    assert record.summary() == {"id": user_id, "name": "alice", "ip": "203.0.113.9"}


def test_rename_unknown_user_returns_false(registry):
    assert registry.rename_user("missing", "x") is False


def test_rename_updates_name(registry):
    user_id = registry.register_user(Conn(), "x", "")
    assert registry.rename_user(user_id, "y") is True
    assert registry.lookup_user(user_id).name == "y"


def test_remove_user(registry):
    user_id = registry.register_user(Conn(), "x", "")

    removed = registry.remove_user(user_id)
    assert removed is not None and removed.id == user_id
    assert registry.remove_user(user_id) is None
    assert registry.lookup_user(user_id) is None
    assert len(registry) == 0


def test_set_admin_overwrites(registry):
    first, second = Conn(), Conn()
    registry.set_admin(first)
    registry.set_admin(second)
    assert registry.admin is second


def test_clear_admin_only_when_current(registry):
    stale, current = Conn(), Conn()
    registry.set_admin(stale)
    registry.set_admin(current)

    assert registry.clear_admin(stale) is False
    assert registry.admin is current
    assert registry.clear_admin(current) is True
    assert registry.admin is None


def test_record_does_not_keep_connection_alive():
    registry = PresenceRegistry()
    conn = Conn()
    user_id = registry.register_user(conn, "ghost", "")

    del conn
    gc.collect()

    assert registry.lookup_user(user_id).connection is None
