# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-17
# Description: test_vm_embedder.py
# -----------------------------------------------------------------------------
import math
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from config.Config import Config
from embedding.VMEmbedder import VMEmbedder
from record.VMErrors import EmbeddingMalformed, EmbeddingUnavailable

EMBED_URL = "http://localhost:11434/v1/embeddings"


def _response(vector):
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


def _embedder(*responses, normalize: bool = True, side_effect=None) -> VMEmbedder:
    client = MagicMock()
    if side_effect is not None:
        client.embeddings.create.side_effect = side_effect
    else:
        client.embeddings.create.side_effect = list(responses)
    return VMEmbedder(Config(embed_normalize=normalize), client=client)


def test_embed_normalises_and_establishes_dimension():
    embedder = _embedder(_response([3.0, 4.0]))

    vec = embedder.embed("hello")

    assert vec == pytest.approx([0.6, 0.8], rel=1e-5)
    assert embedder.dimension == 2
    embedder.client.embeddings.create.assert_called_once_with(model="nomic-embed-text", input="hello")


def test_embed_without_normalisation():
    embedder = _embedder(_response([3.0, 4.0]), normalize=False)
    assert embedder.embed("hello") == pytest.approx([3.0, 4.0])


def test_connection_error_is_unavailable():
    request = httpx.Request("POST", EMBED_URL)
    embedder = _embedder(side_effect=openai.APIConnectionError(request=request))

    with pytest.raises(EmbeddingUnavailable):
        embedder.embed("hello")


def test_timeout_is_unavailable():
    request = httpx.Request("POST", EMBED_URL)
    embedder = _embedder(side_effect=openai.APITimeoutError(request=request))

    with pytest.raises(EmbeddingUnavailable):
        embedder.embed("hello")


def test_non_2xx_is_unavailable():
    request = httpx.Request("POST", EMBED_URL)
    response = httpx.Response(404, request=request, json={"error": "model 'nomic-embed-text' not found"})
    error = openai.NotFoundError("model not found", response=response, body=None)
    embedder = _embedder(side_effect=error)

    with pytest.raises(EmbeddingUnavailable) as exc:
        embedder.embed("hello")
    assert exc.value.__cause__ is error


@pytest.mark.parametrize(
    "payload",
    [
        SimpleNamespace(data=[]),
        _response([]),
        _response(None),
        _response([1.0, math.nan]),
        _response([1.0, math.inf]),
    ],
)
def test_malformed_payloads(payload):
    embedder = _embedder(payload)
    with pytest.raises(EmbeddingMalformed):
        embedder.embed("hello")
    assert embedder.dimension is None


def test_dimension_change_is_malformed():
    embedder = _embedder(_response([1.0, 0.0, 0.0]), _response([1.0, 0.0]))

    embedder.embed("first")
    with pytest.raises(EmbeddingMalformed):
        embedder.embed("second")
    assert embedder.dimension == 3


def test_expected_dim_from_collection_wins():
    embedder = _embedder(_response([1.0, 0.0, 0.0]))

    with pytest.raises(EmbeddingMalformed):
        embedder.embed("hello", expected_dim=768)


def test_blank_text_never_reaches_provider():
    embedder = _embedder()

    with pytest.raises(EmbeddingMalformed):
        embedder.embed("   ")
    embedder.client.embeddings.create.assert_not_called()


def test_test_connection_reports_failure_without_raising():
    request = httpx.Request("POST", EMBED_URL)
    embedder = _embedder(side_effect=openai.APIConnectionError(request=request))

    assert embedder.test_connection() is False


def test_ollama_client_uses_openai_compatible_endpoint_without_retries():
    embedder = VMEmbedder(Config(embed_base_url="http://ollama.local:11434/", embed_timeout_s=7.5))

    assert str(embedder.client.base_url).rstrip("/") == "http://ollama.local:11434/v1"
    assert embedder.client.max_retries == 0
    assert embedder.client.timeout == 7.5


def test_azure_client():
    cfg = Config(
        embed_provider="azure",
        embed_base_url="https://example.openai.azure.com",
        embed_api_key="secret",
        embed_model="text-embedding-3-large",
    )
    embedder = VMEmbedder(cfg)

    assert isinstance(embedder.client, openai.AzureOpenAI)
    assert embedder.client.max_retries == 0
