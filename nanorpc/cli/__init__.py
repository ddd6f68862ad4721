"""Command-line interface for nanorpc."""
