"""Session validation and cache-consistency engine.

Creates, validates, prolongs and deletes database-backed user sessions,
memoizing lookups in a TTL cache that is kept consistent with the store.

Usage:
    from session_engine.core.container import get_session_lifecycle

    lifecycle = get_session_lifecycle()
    record = await lifecycle.create(42, "user@example.com", "203.0.113.7")
    record = await lifecycle.process(
        {"params": {"session-id": record.id}, "remote_ip": "203.0.113.7"}
    )
"""

__version__ = "0.1.0"
