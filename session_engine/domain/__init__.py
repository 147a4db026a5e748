"""Domain layer: session data model, error taxonomy, state machine, ports.

Pure Python, no framework or database dependencies.
"""
