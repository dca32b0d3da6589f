"""Agent-facing tool callables."""
