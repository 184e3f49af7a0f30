"""Helpers for response rendering and client identification."""
