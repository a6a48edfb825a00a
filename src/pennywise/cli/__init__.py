"""Command-line interface for pennywise."""
