"""Workers, shared state and generation services."""
