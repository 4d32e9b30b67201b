"""Shared infrastructure: configuration, secrets, exceptions, logging, CLI."""
