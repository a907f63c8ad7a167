"""Command-line interface for qwform."""
