"""I/O adapters that feed the resolver."""
