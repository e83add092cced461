"""Shared infrastructure: configuration, exceptions, file and logging helpers."""
