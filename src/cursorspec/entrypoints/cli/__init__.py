"""Command-line interface for cursorspec."""
