"""Configuration input/output."""
