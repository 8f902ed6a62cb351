"""Pydantic schemas for request bodies and API responses."""
