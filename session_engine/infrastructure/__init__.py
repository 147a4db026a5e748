"""Infrastructure adapters (security, cache, persistence, logging)."""
