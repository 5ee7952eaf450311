"""Command-line interface for streamerctl."""
