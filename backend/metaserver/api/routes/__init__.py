"""Metadata routers, one per serving mode."""
