"""Command runners behind the relgen CLI."""
