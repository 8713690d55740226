"""Persistence layer: ORM models and the injected Database handle."""
