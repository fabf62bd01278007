"""Per-application secret store adapter."""
