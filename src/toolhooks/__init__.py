"""Guard hooks run around a coding agent's tool calls."""

__version__ = "0.1.0"
