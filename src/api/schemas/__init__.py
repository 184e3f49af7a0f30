"""Pydantic models shared by the API layer."""
