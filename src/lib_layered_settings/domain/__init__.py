"""Domain value objects, source declarations and errors (no I/O)."""
