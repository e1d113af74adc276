"""orgdir: CLI for a CSV-backed organizational directory."""

__version__ = "0.1.0"
