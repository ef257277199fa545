"""
SQLite node store implementation.

Local, file-backed storage using aiosqlite. ``summary_of`` and embeddings
are kept as JSON columns; timestamps are indexed as UTC epoch seconds.
"""

import json
from datetime import datetime
from pathlib import Path

import aiosqlite

from healthmem.core.node_store.base import NodeStore
from healthmem.models.node import MedicalNode, NodeMetadata, ensure_utc
from healthmem.utils.exceptions import NotFoundError, StoreError
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class SQLiteNodeStore(NodeStore):
    """
    SQLite-based store for medical nodes.

    Features:
    - Fast local storage
    - JSON columns for hierarchy references and embeddings
    - Indexed layer / patient / time-range filtering
    """

    def __init__(self, db_path: str = "data/healthmem.db"):
        """
        Initialize SQLite node store.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory db)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            try:
                self.connection = await aiosqlite.connect(self.db_path)
                await self.connection.execute("PRAGMA journal_mode = WAL")
                await self.connection.commit()
            except aiosqlite.Error as e:
                raise StoreError(
                    f"Failed to open node store: {e}", context={"db_path": self.db_path}
                ) from e

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        try:
            await self.connection.execute(
                """
                CREATE TABLE IF NOT EXISTS medical_nodes (
                    id TEXT PRIMARY KEY,
                    content TEXT NOT NULL,
                    embedding TEXT,
                    record_type TEXT NOT NULL,
                    patient_id TEXT NOT NULL,
                    layer INTEGER NOT NULL,
                    summary_of TEXT,
                    created_at TEXT NOT NULL,
                    created_ts REAL NOT NULL
                )
            """
            )
            await self.connection.execute(
                "CREATE INDEX IF NOT EXISTS idx_nodes_layer ON medical_nodes(layer, patient_id)"
            )
            await self.connection.execute(
                "CREATE INDEX IF NOT EXISTS idx_nodes_created ON medical_nodes(created_ts)"
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to initialize node store: {e}") from e

        logger.info(f"SQLite node store initialized at {self.db_path}")

    # ═══════════════════════════════════════════════════════════
    # NODE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def create(self, node: MedicalNode) -> MedicalNode:
        """Insert a node; ids are never overwritten."""
        await self.connect()

        metadata = node.metadata
        try:
            await self.connection.execute(
                """
                INSERT INTO medical_nodes (
                    id, content, embedding, record_type, patient_id,
                    layer, summary_of, created_at, created_ts
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    node.id,
                    node.content,
                    json.dumps(node.embedding) if node.embedding else None,
                    metadata.record_type,
                    metadata.patient_id,
                    metadata.layer,
                    json.dumps(metadata.summary_of) if metadata.summary_of else None,
                    metadata.created_at.isoformat(),
                    metadata.created_at.timestamp(),
                ),
            )
            await self.connection.commit()
        except aiosqlite.IntegrityError as e:
            raise StoreError(f"Node already exists: {node.id}", context={"node_id": node.id}) from e
        except aiosqlite.Error as e:
            raise StoreError(
                f"Failed to create node: {e}", context={"node_id": node.id}
            ) from e

        return node

    async def get(self, node_id: str) -> MedicalNode | None:
        """Retrieve a node by ID."""
        await self.connect()

        try:
            cursor = await self.connection.execute(
                "SELECT * FROM medical_nodes WHERE id = ?", (node_id,)
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to read node: {e}", context={"node_id": node_id}) from e

        if not row:
            return None

        return self._row_to_node(row)

    async def query_nodes(
        self,
        layer: int | None = None,
        min_layer: int = 0,
        patient_id: str | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        record_type: str | None = None,
    ) -> list[MedicalNode]:
        """Query nodes with filters."""
        await self.connect()

        query = "SELECT * FROM medical_nodes WHERE 1=1"
        params: list = []

        if layer is not None:
            query += " AND layer = ?"
            params.append(layer)
        elif min_layer > 0:
            query += " AND layer >= ?"
            params.append(min_layer)

        if patient_id is not None:
            query += " AND patient_id = ?"
            params.append(patient_id)

        if created_after is not None:
            query += " AND created_ts >= ?"
            params.append(ensure_utc(created_after).timestamp())

        if created_before is not None:
            query += " AND created_ts <= ?"
            params.append(ensure_utc(created_before).timestamp())

        if record_type is not None:
            query += " AND record_type = ?"
            params.append(record_type)

        query += " ORDER BY created_ts ASC"

        try:
            cursor = await self.connection.execute(query, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to query nodes: {e}", context={"layer": layer}) from e

        return [self._row_to_node(row) for row in rows]

    async def delete(self, node_id: str) -> None:
        """Hard-delete a node."""
        await self.connect()

        try:
            cursor = await self.connection.execute(
                "DELETE FROM medical_nodes WHERE id = ?", (node_id,)
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to delete node: {e}", context={"node_id": node_id}) from e

        if cursor.rowcount == 0:
            raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})

    async def count(self, layer: int | None = None) -> int:
        """Count stored nodes."""
        await self.connect()

        try:
            if layer is None:
                cursor = await self.connection.execute("SELECT COUNT(*) FROM medical_nodes")
            else:
                cursor = await self.connection.execute(
                    "SELECT COUNT(*) FROM medical_nodes WHERE layer = ?", (layer,)
                )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to count nodes: {e}", context={"layer": layer}) from e
        return row[0] if row else 0

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    def _row_to_node(self, row: tuple) -> MedicalNode:
        """Convert database row to MedicalNode."""
        return MedicalNode(
            id=row[0],
            content=row[1],
            embedding=json.loads(row[2]) if row[2] else None,
            metadata=NodeMetadata(
                record_type=row[3],
                patient_id=row[4],
                layer=row[5],
                summary_of=json.loads(row[6]) if row[6] else None,
                created_at=datetime.fromisoformat(row[7]),
            ),
        )
