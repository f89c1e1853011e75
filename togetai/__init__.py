"""Togetai feedback and early-access collection service."""
