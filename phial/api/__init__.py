"""API Layer — FastAPI response writers, router shortcut and error handlers.

Invariants:
    - Routers are included explicitly (no auto-discovery)
    - Every helper returns a Starlette Response; nothing writes to the socket directly
"""
