"""
healthmem FastAPI Application

A REST bridge over the HealthMemory core.
Provides endpoints for recording health data, searching it, routing
generation requests and producing period summaries.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from healthmem.config import Config
from healthmem.models.health import HealthSummaryReport, SummaryType
from healthmem.models.llm import UsageStats
from healthmem.models.search import MultiHopResult, SearchStrategy, SmartSearchResult
from healthmem.services.health_memory import HealthMemory
from healthmem.utils.exceptions import (
    BackendFailureError,
    BackendUnavailableError,
    HealthMemoryError,
    InvalidInputError,
    NotFoundError,
)
from healthmem.utils.logger import get_logger, setup_logging

# Global core instance
memory: HealthMemory | None = None
logger = get_logger(__name__)


# Pydantic models for API
class AddRecordRequest(BaseModel):
    """Request model for adding a health record."""

    content: str = Field(..., description="Record text")
    record_type: str = Field(..., description="symptom, diagnosis, medication, vital_sign, ...")
    patient_id: str | None = None
    created_at: datetime | None = None
    embedding: list[float] | None = None


class AddRecordResponse(BaseModel):
    """Response model for add record."""

    node_id: str


class SearchRequest(BaseModel):
    """Request model for searching records."""

    query: str = Field(..., description="Search query")
    limit: int = Field(default=10, ge=1, le=100, description="Max results")
    strategy: SearchStrategy | None = None
    patient_id: str | None = None


class MultiHopRequest(BaseModel):
    """Request model for hierarchical search."""

    query: str
    max_hops: int | None = Field(default=None, ge=0)
    top_k: int | None = Field(default=None, ge=1)
    patient_id: str | None = None


class GenerateRequest(BaseModel):
    """Request model for free-form generation."""

    prompt: str


class GenerateResponse(BaseModel):
    """Generated text and the backend that produced it."""

    text: str
    adapter: str


class SummaryRequest(BaseModel):
    """Request model for a period summary."""

    start_date: datetime
    end_date: datetime
    summary_type: SummaryType = SummaryType.MONTHLY
    patient_id: str | None = None


class NetworkRequest(BaseModel):
    """Connectivity signal from the host."""

    available: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    initialized: bool
    routing_strategy: str | None = None
    network_available: bool | None = None
    generation_available: bool | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global memory

    # Load configuration from environment or use defaults
    config = Config.from_env()

    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
    )

    logger.info("Starting healthmem server")
    logger.info(
        f"Configuration: store={config.store.backend}, router={config.router.strategy}, "
        f"local={config.local_model.model if config.local_model.enabled else 'disabled'}, "
        f"cloud={config.cloud_model.model if config.cloud_model.api_key else 'disabled'}"
    )

    memory = HealthMemory.from_config(config)
    await memory.initialize()

    yield

    logger.info("Shutting down healthmem server")
    await memory.close()
    memory = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="healthmem API",
    description="Hierarchical health memory with adaptive retrieval and model routing",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_memory() -> HealthMemory:
    if not memory:
        raise HTTPException(status_code=503, detail="Health memory not initialized")
    return memory


def _to_http(e: HealthMemoryError) -> HTTPException:
    """Map core errors onto HTTP status codes."""
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, BackendUnavailableError):
        return HTTPException(status_code=503, detail=e.message)
    if isinstance(e, BackendFailureError):
        return HTTPException(status_code=502, detail=e.message)
    logger.error(f"Unhandled core error: {e}")
    return HTTPException(status_code=500, detail=e.message)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    if not memory:
        return HealthResponse(status="initializing", initialized=False)
    return HealthResponse(
        status="healthy",
        initialized=True,
        routing_strategy=memory.router.strategy.value,
        network_available=await memory.router.is_network_available(),
        generation_available=await memory.router.is_available(),
    )


# Record endpoints
@app.post("/records", response_model=AddRecordResponse)
async def add_record(request: AddRecordRequest):
    """Store a raw health record as a layer-0 node."""
    core = _require_memory()
    try:
        node_id = await core.ingest(
            request.content,
            record_type=request.record_type,
            patient_id=request.patient_id,
            created_at=request.created_at,
            embedding=request.embedding,
        )
    except HealthMemoryError as e:
        raise _to_http(e) from e
    return AddRecordResponse(node_id=node_id)


@app.get("/records/{node_id}")
async def get_record(node_id: str) -> dict[str, Any]:
    """Retrieve a node (record or summary) by ID."""
    core = _require_memory()
    try:
        node = await core.get_node(node_id)
    except HealthMemoryError as e:
        raise _to_http(e) from e
    return node.model_dump(mode="json")


@app.delete("/records/{node_id}")
async def delete_record(node_id: str):
    """Hard-delete a node."""
    core = _require_memory()
    try:
        await core.delete_node(node_id)
    except HealthMemoryError as e:
        raise _to_http(e) from e
    return {"deleted": node_id}


# Retrieval endpoints
@app.post("/search", response_model=list[str])
async def search(request: SearchRequest):
    """Direct search; the strategy is chosen from the query when omitted."""
    core = _require_memory()
    try:
        return await core.search(
            request.query, request.limit, request.strategy, patient_id=request.patient_id
        )
    except HealthMemoryError as e:
        raise _to_http(e) from e


@app.post("/search/multi-hop", response_model=list[MultiHopResult])
async def multi_hop(request: MultiHopRequest):
    """Search with the summaries that include each hit."""
    core = _require_memory()
    try:
        return await core.multi_hop(
            request.query,
            max_hops=request.max_hops,
            top_k=request.top_k,
            patient_id=request.patient_id,
        )
    except HealthMemoryError as e:
        raise _to_http(e) from e


@app.post("/search/smart", response_model=SmartSearchResult)
async def smart_search(request: SearchRequest):
    """Strategy-selecting search returning direct and hierarchical results."""
    core = _require_memory()
    try:
        return await core.smart_search(request.query, request.limit, patient_id=request.patient_id)
    except HealthMemoryError as e:
        raise _to_http(e) from e


@app.post("/search/compare", response_model=dict[str, list[str]])
async def compare_strategies(request: SearchRequest):
    """Run the query under every strategy."""
    core = _require_memory()
    return await core.compare_strategies(
        request.query, request.limit, patient_id=request.patient_id
    )


@app.get("/strategies/{strategy}/explain")
async def explain_strategy(strategy: SearchStrategy):
    """Why a strategy is used, for UI transparency."""
    return {"strategy": strategy.value, "explanation": HealthMemory.explain(strategy)}


# Generation endpoints
@app.post("/generate", response_model=GenerateResponse)
async def generate(request: GenerateRequest):
    """Generate text with the routed backend."""
    core = _require_memory()
    try:
        text, adapter = await core.generate_text(request.prompt)
    except HealthMemoryError as e:
        raise _to_http(e) from e
    return GenerateResponse(text=text, adapter=str(adapter))


@app.post("/summaries", response_model=HealthSummaryReport)
async def generate_summary(request: SummaryRequest):
    """Summarize one time window of records."""
    core = _require_memory()
    try:
        return await core.generate_summary(
            request.start_date,
            request.end_date,
            request.summary_type,
            patient_id=request.patient_id,
        )
    except HealthMemoryError as e:
        raise _to_http(e) from e


@app.put("/network")
async def set_network(request: NetworkRequest):
    """Update network availability."""
    core = _require_memory()
    await core.set_network_available(request.available)
    return {"network_available": request.available}


@app.get("/usage", response_model=UsageStats)
async def get_usage():
    """Cloud usage counters."""
    core = _require_memory()
    usage = await core.usage()
    if usage is None:
        raise HTTPException(status_code=404, detail="Cloud adapter not configured")
    return usage


@app.post("/usage/reset")
async def reset_usage():
    """Zero the cloud usage counters."""
    core = _require_memory()
    try:
        await core.reset_usage()
    except HealthMemoryError as e:
        raise _to_http(e) from e
    return {"reset": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="127.0.0.1", port=8000, log_level="info")
