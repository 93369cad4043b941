"""Declarative bases.

Shared-store tables and tenant-store tables live in separate metadata so
each can be created on its own database file.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base for tables in the shared store (users, mappings, feedback)."""


class TenantBase(DeclarativeBase):
    """Base for tables in a per-user tenant store."""
