"""Interactive command layer: router, prompts, and per-group leaf handlers."""
