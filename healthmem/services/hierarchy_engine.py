"""
Hierarchy Engine - creates layer-0 records and layer-N summary nodes.

Layer rules:
- layer 0 nodes are raw observations and reference nothing
- layer N >= 1 nodes reference the lower-layer nodes they summarize
- references never cross patients

Existence of referenced ids is the caller's responsibility; the engine
writes exactly once per call and does not retry store failures.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from healthmem.core.node_store.base import NodeStore
from healthmem.models.node import MedicalNode, NodeMetadata
from healthmem.utils.exceptions import InvalidInputError, NotFoundError
from healthmem.utils.logger import get_logger

logger = get_logger(__name__)


class HierarchyEngine:
    """
    Writes nodes into the hierarchy and enforces layer invariants.

    Usage:
        engine = HierarchyEngine(store, patient_id="patient-1")
        record_id = await engine.ingest("Blood pressure 130/85", record_type="vital_sign")
        summary_id = await engine.create_summary_node(
            "Stable blood pressure", [record_id], layer=1, record_type="health_period_summary"
        )
    """

    def __init__(self, store: NodeStore, patient_id: str = "default"):
        """
        Initialize Hierarchy Engine.

        Args:
            store: Node store (single source of truth)
            patient_id: Patient used when a call doesn't name one
        """
        self.store = store
        self.patient_id = patient_id

    async def add_node(
        self,
        content: str,
        metadata: NodeMetadata | dict,
        embedding: list[float] | None = None,
    ) -> str:
        """
        Store a node.

        Args:
            content: Record text or summary
            metadata: Node metadata (model or plain dict)
            embedding: Optional precomputed embedding

        Returns:
            ID of the new node

        Raises:
            InvalidInputError: If content is blank or layer/summary_of are inconsistent
            StoreError: If the store write fails
        """
        try:
            if not isinstance(metadata, NodeMetadata):
                metadata = NodeMetadata.model_validate(metadata)
            node = MedicalNode(content=content, metadata=metadata, embedding=embedding)
        except PydanticValidationError as e:
            raise InvalidInputError(
                f"Invalid node: {_first_error(e)}", context={"errors": e.errors()}
            ) from e

        await self.store.create(node)

        logger.info(
            f"Created layer {node.layer} node {node.id}",
            extra={
                "node_id": node.id,
                "layer": node.layer,
                "record_type": node.record_type,
                "sources": len(node.summary_of),
            },
        )
        return node.id

    async def ingest(
        self,
        content: str,
        record_type: str,
        patient_id: str | None = None,
        created_at: datetime | None = None,
        embedding: list[float] | None = None,
    ) -> str:
        """
        Store a raw health record as a layer-0 node.

        Args:
            content: Record text
            record_type: symptom, diagnosis, medication, vital_sign, ...
            patient_id: Owning patient (engine default if omitted)
            created_at: Observation time (now if omitted)
            embedding: Optional precomputed embedding

        Returns:
            ID of the new node
        """
        metadata = {
            "record_type": record_type,
            "patient_id": patient_id or self.patient_id,
            "layer": 0,
        }
        if created_at is not None:
            metadata["created_at"] = created_at

        return await self.add_node(content, metadata, embedding)

    async def create_summary_node(
        self,
        content: str,
        source_ids: list[str],
        layer: int,
        record_type: str,
        patient_id: str | None = None,
    ) -> str:
        """
        Store a summary of lower-layer nodes.

        The patient comes from the caller's context, never from the sources.

        Args:
            content: Summary text
            source_ids: IDs of the summarized nodes
            layer: Layer of the summary (>= 1)
            record_type: Type tag, e.g. "health_period_summary"
            patient_id: Owning patient (engine default if omitted)

        Returns:
            ID of the new summary node

        Raises:
            InvalidInputError: If layer < 1 or source_ids is empty
        """
        if layer < 1:
            raise InvalidInputError(
                f"Summary nodes must be at layer 1 or above, got {layer}", context={"layer": layer}
            )

        metadata = {
            "created_at": datetime.now(UTC),
            "record_type": record_type,
            "patient_id": patient_id or self.patient_id,
            "layer": layer,
            # Order-preserving dedup
            "summary_of": list(dict.fromkeys(source_ids)),
        }

        return await self.add_node(content, metadata)

    @staticmethod
    def check_sources(sources: Iterable[MedicalNode], layer: int, patient_id: str) -> None:
        """
        Verify that nodes may be summarized by a node at ``layer``.

        Args:
            sources: Nodes to be summarized
            layer: Layer of the summary node
            patient_id: Patient of the summary node

        Raises:
            InvalidInputError: If a source is not strictly lower or belongs to another patient
        """
        for source in sources:
            if source.layer >= layer:
                raise InvalidInputError(
                    f"Node {source.id} at layer {source.layer} cannot be summarized at layer {layer}",
                    context={"node_id": source.id, "layer": source.layer},
                )
            if source.patient_id != patient_id:
                raise InvalidInputError(
                    f"Node {source.id} belongs to another patient",
                    context={"node_id": source.id, "patient_id": source.patient_id},
                )

    async def get_node(self, node_id: str) -> MedicalNode:
        """
        Fetch a node.

        Raises:
            NotFoundError: If the node doesn't exist
        """
        node = await self.store.get(node_id)
        if node is None:
            raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})
        return node

    async def delete_node(self, node_id: str) -> None:
        """Hard-delete a node."""
        await self.store.delete(node_id)
        logger.info(f"Deleted node {node_id}", extra={"node_id": node_id})


def _first_error(error: PydanticValidationError) -> str:
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]
