"""Shared data model for the sky-search client."""
