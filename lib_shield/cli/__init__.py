"""Command line interface for LibShield."""
