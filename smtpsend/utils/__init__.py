"""Shared utilities: configuration, errors, logging, console."""
