"""Document store for submitted records.

Records are schemaless JSON documents grouped into named collections
(contacts, enquiries, products, faqs). The SQLite adapter keeps every
document in one table and filters on JSON fields.
"""

import json
import re
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@runtime_checkable
class DocumentStore(Protocol):
    """Interface all document stores must implement."""

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]: ...

    def get(self, collection: str, id: str) -> dict[str, Any] | None: ...

    def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        sort: list[tuple[str, str]] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]: ...

    def count(self, collection: str, filter: dict[str, Any] | None = None) -> int: ...

    def update(
        self, collection: str, id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete(self, collection: str, id: str) -> bool: ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_path(field: str) -> str:
    if not _FIELD_NAME.match(field):
        raise ValueError(f"Invalid field name: {field!r}")
    return f"$.{field}"


class SQLiteDocumentStore:
    """SQLite-backed document store."""

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the connection and create the documents table."""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS documents ("
            " collection TEXT NOT NULL,"
            " id TEXT NOT NULL,"
            " body TEXT NOT NULL,"
            " PRIMARY KEY (collection, id))"
        )
        self.conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not connected")
        return self.conn

    def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        """Store a new document, stamping id and audit timestamps.

        Returns:
            The stored document
        """
        conn = self._require_conn()

        record = dict(document)
        record.setdefault("id", uuid.uuid4().hex)
        now = _now()
        record.setdefault("createdAt", now)
        record.setdefault("updatedAt", now)

        conn.execute(
            "INSERT INTO documents (collection, id, body) VALUES (?, ?, ?)",
            [collection, record["id"], json.dumps(record, default=str)],
        )
        conn.commit()
        return record

    def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Fetch a single document by ID."""
        conn = self._require_conn()
        row = conn.execute(
            "SELECT body FROM documents WHERE collection = ? AND id = ?",
            [collection, id],
        ).fetchone()
        return json.loads(row["body"]) if row else None

    def _where(
        self, collection: str, filter: dict[str, Any] | None
    ) -> tuple[str, list[Any]]:
        clauses = ["collection = ?"]
        params: list[Any] = [collection]
        for field, value in (filter or {}).items():
            clauses.append("json_extract(body, ?) = ?")
            params.extend([_json_path(field), value])
        return " AND ".join(clauses), params

    def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        sort: list[tuple[str, str]] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents by field equality.

        Args:
            collection: Collection name
            filter: Field -> value equality conditions (ANDed)
            sort: (field, "asc" | "desc") pairs; defaults to newest first
            limit: Maximum documents to return
            offset: Documents to skip

        Returns:
            Matching documents
        """
        conn = self._require_conn()
        where, params = self._where(collection, filter)

        order_parts = []
        for field, direction in sort or [("createdAt", "desc")]:
            keyword = "DESC" if direction.lower() == "desc" else "ASC"
            order_parts.append(f"json_extract(body, ?) {keyword}")
            params.append(_json_path(field))

        sql = f"SELECT body FROM documents WHERE {where} ORDER BY {', '.join(order_parts)}"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        elif offset:
            sql += " LIMIT -1 OFFSET ?"
            params.append(offset)

        return [json.loads(row["body"]) for row in conn.execute(sql, params)]

    def count(self, collection: str, filter: dict[str, Any] | None = None) -> int:
        conn = self._require_conn()
        where, params = self._where(collection, filter)
        row = conn.execute(f"SELECT COUNT(*) FROM documents WHERE {where}", params).fetchone()
        return row[0]

    def update(
        self, collection: str, id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Merge changes into an existing document."""
        conn = self._require_conn()

        existing = self.get(collection, id)
        if existing is None:
            return None

        updated = {**existing, **changes, "id": id, "updatedAt": _now()}
        conn.execute(
            "UPDATE documents SET body = ? WHERE collection = ? AND id = ?",
            [json.dumps(updated, default=str), collection, id],
        )
        conn.commit()
        return updated

    def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        conn = self._require_conn()
        cursor = conn.execute(
            "DELETE FROM documents WHERE collection = ? AND id = ?",
            [collection, id],
        )
        conn.commit()
        return cursor.rowcount > 0
