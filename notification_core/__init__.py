"""Notification delivery core for the services marketplace backend."""
