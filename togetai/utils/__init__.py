"""Shared helpers for the Togetai service."""
