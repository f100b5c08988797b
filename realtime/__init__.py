"""
Realtime relay app.

This app contains:
- A Channels consumer for `/live-chat` shared by the admin and all users
- The in-memory presence registry (single admin slot + connected users)
- The session protocol / router and the heartbeat-based liveness monitor
"""
