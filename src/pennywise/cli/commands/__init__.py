"""CLI commands for pennywise."""
