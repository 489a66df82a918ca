"""Helpers shared by the application factory."""
