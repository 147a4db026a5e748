"""Application layer: session services and request context helpers."""
