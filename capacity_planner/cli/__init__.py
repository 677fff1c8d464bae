"""Command line entry point and terminal display."""
