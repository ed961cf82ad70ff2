"""Command-line interface: ``addressiq serve | lookup | sources``."""
