"""
Tests for local model acquisition.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from healthmem.core.llm.model_manager import ModelManager, normalize_model_id
from healthmem.utils.exceptions import ModelAcquisitionError, NotFoundError


def listing(*models: tuple[str, int]):
    return SimpleNamespace(models=[SimpleNamespace(model=name, size=size) for name, size in models])


async def progress_stream(*updates):
    for completed, total in updates:
        yield SimpleNamespace(status="pulling", completed=completed, total=total)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def manager(client):
    return ModelManager(host="http://localhost:11434", client=client)


@pytest.mark.unit
@pytest.mark.asyncio
class TestModelManager:
    """Test the local model cache."""

    async def test_normalize_model_id(self):
        assert normalize_model_id("phi3") == "phi3:latest"
        assert normalize_model_id("phi3:mini") == "phi3:mini"

    async def test_list_models(self, manager, client):
        client.list = AsyncMock(return_value=listing(("phi3:mini", 2_000), ("llama3", 4_000)))

        models = await manager.list_models()

        assert {m.id for m in models} == {"phi3:mini", "llama3:latest"}
        assert all(m.is_downloaded for m in models)

    async def test_is_downloaded_uses_cache(self, manager, client):
        client.list = AsyncMock(return_value=listing(("phi3:mini", 2_000)))

        assert await manager.is_downloaded("phi3:mini") is True
        assert await manager.is_downloaded("phi3:mini") is True
        client.list.assert_called_once()

    async def test_resolve_local_model(self, manager, client):
        client.list = AsyncMock(return_value=listing(("llama3", 4_000)))

        assert await manager.resolve_local_model("llama3") == "llama3"
        with pytest.raises(NotFoundError):
            await manager.resolve_local_model("mistral")

    async def test_list_failure(self, manager, client):
        client.list = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(ModelAcquisitionError):
            await manager.is_downloaded("phi3:mini")

    async def test_pull_reports_progress(self, manager, client):
        client.list = AsyncMock(side_effect=[listing(), listing(("phi3:mini", 2_000))])
        client.pull = AsyncMock(return_value=progress_stream((500, 2_000), (2_000, 2_000)))
        updates = []

        info = await manager.pull("phi3:mini", progress_callback=updates.append)

        assert info.id == "phi3:mini"
        assert [u.percentage for u in updates] == [25.0, 100.0]
        client.pull.assert_called_once_with("phi3:mini", stream=True)

    async def test_pull_skips_downloaded(self, manager, client):
        client.list = AsyncMock(return_value=listing(("phi3:mini", 2_000)))
        client.pull = AsyncMock()

        await manager.pull("phi3:mini")

        client.pull.assert_not_called()

    async def test_pull_failure(self, manager, client):
        client.list = AsyncMock(return_value=listing())
        client.pull = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(ModelAcquisitionError):
            await manager.pull("phi3:mini")
