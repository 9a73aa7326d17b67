"""CLI module for termdesk."""
