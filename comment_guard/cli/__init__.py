"""Command line interface for comment-guard."""
