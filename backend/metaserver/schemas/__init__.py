"""Pydantic schemas for backend replies and rendered documents."""
