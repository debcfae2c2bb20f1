"""Persistence operations over ORM models."""
