import base64

import pytest

from hub_client import admin_frame, describe, user_frame


def test_admin_message_line():
    assert admin_frame("@abc123 hello there") == {"type": "message", "to": "abc123", "text": "hello there"}


def test_admin_commands():
    assert admin_frame("/users") == {"type": "admin-init"}
    assert admin_frame("/ping") == {"type": "ping"}
    assert admin_frame("   ") is None


def test_admin_rejects_untargeted_text():
    with pytest.raises(ValueError):
        admin_frame("hello")
    with pytest.raises(ValueError):
        admin_frame("@ hello")


def test_admin_file_line(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hi")

    frame = admin_frame(f"/file u1 {path}")

    assert frame == {
        "type": "file",
        "to": "u1",
        "name": "notes.txt",
        "mime": "text/plain",
        "data": base64.b64encode(b"hi").decode(),
    }


def test_user_lines(tmp_path):
    assert user_frame("hello") == {"type": "message", "text": "hello"}
    assert user_frame("/name Dana") == {"type": "rename", "name": "Dana"}
    assert user_frame("/ping") == {"type": "ping"}
    assert user_frame("") is None

    path = tmp_path / "blob.unknownext"
    path.write_bytes(b"\x00\x01")
    frame = user_frame(f"/file {path}")
    assert frame["mime"] == "application/octet-stream"
    assert "to" not in frame


def test_describe():
    assert describe({"type": "user-connected", "id": "1", "name": "n", "ip": "1.2.3.4"}) == "[+] n (1.2.3.4) id=1"
    assert describe({"type": "message", "from": "u1", "text": "hi"}) == "u1: hi"
    assert describe({"type": "message", "text": "hi"}) == "admin: hi"
    assert describe({"type": "all-users", "users": []}) == "[no users connected]"
    assert describe({"type": "heartbeat"}) is None
