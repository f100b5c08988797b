"""
CLI client for the relay hub.

WebSocket protocol (`HubConsumer`, /live-chat):
- Client sends first:
  - admin: {"type":"admin-init"}
  - user:  {"type":"user-init","name":"<optional>"}
- Admin then sends:
  - {"type":"message","to":"<user id>","text":"..."}
  - {"type":"file","to":"<user id>","name":"...","mime":"...","data":"<base64>"}
- User then sends:
  - {"type":"message","text":"..."}
  - {"type":"file","name":"...","mime":"...","data":"<base64>"}
  - {"type":"rename","name":"..."}
- Server sends:
  - {"type":"all-users","users":[{"id","name","ip"}]}      (admin)
  - {"type":"user-connected"|"user-renamed"|"user-disconnected", ...}  (admin)
  - {"type":"user-id","id":"..."}                           (user)
  - {"type":"message"|"file", ...}
  - {"type":"heartbeat"}  -> answered automatically with {"type":"heartbeat-ack"}

Any client, this one or a third-party one, must answer every {"type":"heartbeat"} with
{"type":"heartbeat-ack"}. A connection that misses one probe is closed with code 4408
at the next, i.e. within two heartbeat intervals (about 60 seconds with the default
HUB_HEARTBEAT_INTERVAL_SECONDS=30). Browser pages under pages/ do this already.

Stdin commands:
- admin: `@<user id> text`, `/file <user id> <path>`, `/users`, `/ping`
- user:  `text`, `/name <new name>`, `/file <path>`, `/ping`
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, Dict, Optional


def _rstrip_slash(s: str) -> str:
    return s[:-1] if s.endswith("/") else s


def _ws_url(ws_base: str) -> str:
    return f"{_rstrip_slash(ws_base)}/live-chat"


async def _stdin_lines() -> str:
    return await asyncio.to_thread(sys.stdin.readline)


def file_frame(path: str, to: Optional[str] = None) -> Dict[str, Any]:
    p = Path(path)
    mime, _ = mimetypes.guess_type(p.name)
    frame: Dict[str, Any] = {
        "type": "file",
        "name": p.name,
        "mime": mime or "application/octet-stream",
        "data": base64.b64encode(p.read_bytes()).decode("ascii"),
    }
    if to:
        frame["to"] = to
    return frame


def admin_frame(line: str) -> Optional[Dict[str, Any]]:
    """Translate one stdin line into an admin frame (None if the line is not a command)."""
    line = line.strip()
    if not line:
        return None
    if line == "/users":
        return {"type": "admin-init"}
    if line == "/ping":
        return {"type": "ping"}
    if line.startswith("/file "):
        parts = line.split(maxsplit=2)
        if len(parts) != 3:
            raise ValueError("usage: /file <user id> <path>")
        return file_frame(parts[2], to=parts[1])
    if line.startswith("@"):
        target, _, text = line[1:].partition(" ")
        if not target:
            raise ValueError("usage: @<user id> text")
        return {"type": "message", "to": target, "text": text}
    raise ValueError("admin lines must start with @<user id>, /file, /users or /ping")


def user_frame(line: str) -> Optional[Dict[str, Any]]:
    """Translate one stdin line into a user frame (None for blank lines)."""
    line = line.strip()
    if not line:
        return None
    if line == "/ping":
        return {"type": "ping"}
    if line.startswith("/name "):
        return {"type": "rename", "name": line[len("/name "):].strip()}
    if line.startswith("/file "):
        return file_frame(line[len("/file "):].strip())
    return {"type": "message", "text": line}


def describe(msg: Dict[str, Any]) -> Optional[str]:
    """Human-readable line for a server frame; None for frames that need no output."""
    t = msg.get("type")
    if t == "all-users":
        users = msg.get("users") or []
        if not users:
            return "[no users connected]"
        return "\n".join(f"[user {u.get('id')}] {u.get('name')} ({u.get('ip')})" for u in users)
    if t == "user-connected":
        return f"[+] {msg.get('name')} ({msg.get('ip')}) id={msg.get('id')}"
    if t == "user-renamed":
        return f"[~] {msg.get('id')} is now {msg.get('name')}"
    if t == "user-disconnected":
        return f"[-] {msg.get('id')} disconnected"
    if t == "user-id":
        return f"[connected as {msg.get('id')}]"
    if t == "message":
        sender = msg.get("from") or "admin"
        return f"{sender}: {msg.get('text', '')}"
    if t == "file":
        sender = msg.get("from") or "admin"
        return f"{sender} sent file {msg.get('name')} ({msg.get('mime')})"
    if t == "pong":
        return "[pong]"
    return None


async def run_session(*, ws_base: str, role: str, name: Optional[str]) -> int:
    try:
        import websockets  # type: ignore
    except Exception:
        print("Missing dependency: websockets. Install with: pip install websockets", file=sys.stderr)
        return 2

    to_frame = admin_frame if role == "admin" else user_frame
    init: Dict[str, Any] = {"type": "admin-init"} if role == "admin" else {"type": "user-init"}
    if role == "user" and name:
        init["name"] = name

    async with websockets.connect(_ws_url(ws_base)) as ws:

        async def _send(frame: Dict[str, Any]) -> None:
            await ws.send(json.dumps(frame, separators=(",", ":"), ensure_ascii=False))

        async def _reader() -> None:
            async for raw in ws:
                try:
                    msg = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if msg.get("type") == "heartbeat":
                    await _send({"type": "heartbeat-ack"})
                    continue
                line = describe(msg)
                if line:
                    sys.stdout.write(line + "\n")
                    sys.stdout.flush()

        await _send(init)
        reader = asyncio.create_task(_reader())

        sys.stderr.write(f"Connected as {role}. Type a line and press Enter to send. Ctrl+C to quit.\n")
        sys.stderr.flush()
        try:
            while not reader.done():
                line = await _stdin_lines()
                if not line:
                    break
                try:
                    frame = to_frame(line)
                except (ValueError, OSError) as e:
                    sys.stderr.write(f"[error {e}]\n")
                    sys.stderr.flush()
                    continue
                if frame is not None:
                    await _send(frame)
        finally:
            reader.cancel()
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(description="CLI client for the admin/user relay hub")
    parser.add_argument("--ws", default="ws://localhost:8000", help="WS base, e.g. ws://localhost:8000")

    sub = parser.add_subparsers(dest="cmd", required=True)
    sub.add_parser("admin", help="Connect as the admin")
    p_user = sub.add_parser("user", help="Connect as a user")
    p_user.add_argument("--name", help="Display name (server picks one if omitted)")

    args = parser.parse_args()
    return await run_session(ws_base=args.ws, role=args.cmd, name=getattr(args, "name", None))


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
