"""Process environment adapter."""
