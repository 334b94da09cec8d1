"""CLI command handlers for repomirror."""
