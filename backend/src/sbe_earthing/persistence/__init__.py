"""Persistence layer - document store adapters."""

from sbe_earthing.persistence.config import DatabaseConfig, create_store
from sbe_earthing.persistence.store import DocumentStore, SQLiteDocumentStore

__all__ = ["DocumentStore", "SQLiteDocumentStore", "DatabaseConfig", "create_store"]
