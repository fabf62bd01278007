"""Developer-only ``.env`` adapter."""
