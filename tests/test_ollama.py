"""Tests for the Ollama HTTP providers against a mocked transport."""

import json

import httpx
import numpy as np
import pytest

from debtscan.embedders.ollama import OllamaEmbedder
from debtscan.errors import ProviderError
from debtscan.generators import OllamaGenerator
from debtscan.protocols import EmbeddingProvider, GenerationProvider


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestOllamaEmbedder:
    @pytest.mark.asyncio
    async def test_embed(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"embeddings": [[0.1, 0.2], [0.3, 0.4]]})

        async with client_for(handler) as client:
            embedder = OllamaEmbedder(base_url="http://ollama:11434/", client=client)
            vectors = await embedder.embed(["a", "b"])

        assert seen["url"] == "http://ollama:11434/api/embed"
        assert seen["body"] == {"model": "nomic-embed-text", "input": ["a", "b"]}
        assert vectors.shape == (2, 2)
        assert vectors.dtype == np.float32

    @pytest.mark.asyncio
    async def test_count_mismatch(self):
        def handler(request):
            return httpx.Response(200, json={"embeddings": [[0.1]]})

        async with client_for(handler) as client:
            with pytest.raises(ProviderError):
                await OllamaEmbedder(client=client).embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request):
            return httpx.Response(500, text="model not loaded")

        async with client_for(handler) as client:
            with pytest.raises(ProviderError, match="500"):
                await OllamaEmbedder(client=client).embed(["a"])

    @pytest.mark.asyncio
    async def test_empty_input_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        async with client_for(handler) as client:
            vectors = await OllamaEmbedder(client=client).embed([])

        assert vectors.shape == (0, 0)


class TestOllamaGenerator:
    @pytest.mark.asyncio
    async def test_generate(self):
        def handler(request):
            body = json.loads(request.content)
            assert body == {"model": "codellama", "prompt": "hi", "stream": False}
            return httpx.Response(200, json={"response": '{"ok": true}', "done": True})

        async with client_for(handler) as client:
            generation = await OllamaGenerator("codellama", client=client).generate("hi")

        assert generation.text == '{"ok": true}'
        assert generation.done is True

    @pytest.mark.asyncio
    async def test_missing_response_field(self):
        def handler(request):
            return httpx.Response(200, json={"error": "oops"})

        async with client_for(handler) as client:
            with pytest.raises(ProviderError):
                await OllamaGenerator(client=client).generate("hi")

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        async with client_for(handler) as client:
            with pytest.raises(ProviderError, match="invalid JSON"):
                await OllamaGenerator(client=client).generate("hi")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with client_for(handler) as client:
            with pytest.raises(ProviderError, match="request failed"):
                await OllamaGenerator(client=client).generate("hi")


def test_adapters_satisfy_protocols():
    assert isinstance(OllamaEmbedder(), EmbeddingProvider)
    assert isinstance(OllamaGenerator(), GenerationProvider)
