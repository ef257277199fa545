"""
Medical node model - the atomic unit of the memory hierarchy.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from healthmem.utils.id_generator import generate_node_id

SUMMARY_RECORD_TYPE = "health_period_summary"


class NodeMetadata(BaseModel):
    """
    Hierarchy metadata carried by every node.

    Layer 0 holds raw observations; layer N >= 1 summarizes nodes of lower
    layers and must name them in ``summary_of``.
    """

    model_config = ConfigDict(frozen=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    record_type: str = Field(..., min_length=1, description="symptom, diagnosis, medication, ...")
    patient_id: str = Field(..., min_length=1)
    layer: int = Field(default=0, ge=0)
    summary_of: list[str] | None = Field(
        default=None, description="IDs of the nodes this node summarizes"
    )

    @field_validator("created_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("summary_of")
    @classmethod
    def _empty_as_none(cls, value: list[str] | None) -> list[str] | None:
        return value or None

    @model_validator(mode="after")
    def _check_layer(self) -> "NodeMetadata":
        if self.layer == 0:
            if self.summary_of:
                raise ValueError("layer 0 nodes cannot summarize other nodes")
        elif not self.summary_of:
            raise ValueError(f"layer {self.layer} nodes require a non-empty summary_of")
        return self

    @property
    def is_summary(self) -> bool:
        return self.layer > 0


class MedicalNode(BaseModel):
    """
    Immutable health memory node.

    Nodes are never updated in place; corrections are new nodes and removal
    is a hard delete in the store.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_node_id)
    content: str = Field(..., description="Record text or generated summary")
    metadata: NodeMetadata
    embedding: list[float] | None = Field(
        default=None, description="Caller-supplied embedding, never computed here"
    )

    @field_validator("content")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("content cannot be empty")
        return value

    @field_validator("embedding")
    @classmethod
    def _non_empty_embedding(cls, value: list[float] | None) -> list[float] | None:
        return value or None

    @property
    def layer(self) -> int:
        return self.metadata.layer

    @property
    def created_at(self) -> datetime:
        return self.metadata.created_at

    @property
    def record_type(self) -> str:
        return self.metadata.record_type

    @property
    def patient_id(self) -> str:
        return self.metadata.patient_id

    @property
    def summary_of(self) -> list[str]:
        return self.metadata.summary_of or []

    def age_days(self, now: datetime | None = None) -> float:
        """
        Age of the node in fractional days.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            Days elapsed since creation, never negative
        """
        now = ensure_utc(now) if now else datetime.now(UTC)
        return max((now - self.created_at).total_seconds() / 86400.0, 0.0)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)
