"""Notifications API: CRUD service over persisted user notifications."""

__version__ = "0.1.0"
