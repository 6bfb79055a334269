"""Core infrastructure: blob storage and configuration."""
