"""Togetai API routes."""

from togetai.api.admin import AdminController
from togetai.api.feedback import SubmissionController
from togetai.api.health import routes as health_routes

__all__ = ["AdminController", "SubmissionController", "health_routes"]
