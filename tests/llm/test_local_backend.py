"""
Tests for the local (Ollama) generation backend.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from healthmem.core.llm.local import LocalBackend
from healthmem.models.health import SummaryType
from healthmem.utils.exceptions import (
    BackendFailureError,
    BackendUnavailableError,
    ModelAcquisitionError,
    NotFoundError,
)


@pytest.fixture
def local_backend():
    """Create local backend for testing, with phi3:mini in the model cache."""
    backend = LocalBackend(host="http://localhost:11434", model="phi3:mini", timeout=120.0)
    backend.model_manager.resolve_local_model = AsyncMock(return_value="phi3:mini")
    return backend


@pytest.mark.unit
@pytest.mark.asyncio
class TestLocalBackend:
    """Test local backend."""

    async def test_initialization(self, local_backend):
        assert local_backend.host == "http://localhost:11434"
        assert local_backend.model == "phi3:mini"
        assert local_backend.client is not None
        assert local_backend.model_manager.client is local_backend.client

    async def test_generate_text(self, local_backend):
        """Test text generation and usage mapping."""
        with patch.object(local_backend.client, "generate", new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = {
                "response": "Your blood pressure is stable.",
                "prompt_eval_count": 12,
                "eval_count": 7,
            }

            result = await local_backend.generate_text("How is my blood pressure?")

            assert result.text == "Your blood pressure is stable."
            assert result.usage.prompt_tokens == 12
            assert result.usage.completion_tokens == 7
            assert result.usage.total_tokens == 19

            call_args = mock_generate.call_args
            assert call_args.kwargs["model"] == "phi3:mini"
            assert call_args.kwargs["options"]["temperature"] == 0.7
            assert call_args.kwargs["options"]["top_p"] == 0.9
            assert call_args.kwargs["options"]["num_predict"] == 512

    async def test_generate_summary_uses_larger_budget(self, local_backend):
        with patch.object(local_backend.client, "generate", new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = {"response": "Summary"}

            result = await local_backend.generate_summary(
                ["Fever 38.5", "Cough"], SummaryType.WEEKLY
            )

            assert result.text == "Summary"
            call_args = mock_generate.call_args
            assert call_args.kwargs["options"]["num_predict"] == 1024
            assert "weekly" in call_args.kwargs["prompt"]
            assert "Fever 38.5" in call_args.kwargs["prompt"]

    async def test_client_error(self, local_backend):
        with patch.object(local_backend.client, "generate", new_callable=AsyncMock) as mock_generate:
            mock_generate.side_effect = ConnectionError("connection refused")

            with pytest.raises(BackendFailureError):
                await local_backend.generate_text("test")

    async def test_empty_response(self, local_backend):
        with patch.object(local_backend.client, "generate", new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = {"response": "  "}

            with pytest.raises(BackendFailureError):
                await local_backend.generate_text("test")

    async def test_availability_follows_model_cache(self, local_backend):
        with patch.object(
            local_backend.model_manager, "is_downloaded", new_callable=AsyncMock
        ) as mock_downloaded:
            mock_downloaded.return_value = True
            assert await local_backend.is_available() is True

            mock_downloaded.side_effect = ModelAcquisitionError("server down")
            assert await local_backend.is_available() is False

    async def test_generate_uses_resolved_model(self):
        """Test that the cache's listed reference is what Ollama runs."""
        backend = LocalBackend(model="llama3")
        backend.client.list = AsyncMock(
            return_value=SimpleNamespace(models=[SimpleNamespace(model="llama3:latest", size=4_000)])
        )

        with patch.object(backend.client, "generate", new_callable=AsyncMock) as mock_generate:
            mock_generate.return_value = {"response": "ok"}
            await backend.generate_text("test")

            assert mock_generate.call_args.kwargs["model"] == "llama3:latest"

    @pytest.mark.parametrize(
        "error", [NotFoundError("Model not downloaded"), ModelAcquisitionError("server down")]
    )
    async def test_model_not_ready(self, local_backend, error):
        local_backend.model_manager.resolve_local_model.side_effect = error

        with patch.object(local_backend.client, "generate", new_callable=AsyncMock) as mock_generate:
            with pytest.raises(BackendUnavailableError):
                await local_backend.generate_text("test")

            mock_generate.assert_not_called()
