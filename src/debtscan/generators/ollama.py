"""Ollama HTTP generation provider."""

import httpx

from debtscan.errors import ProviderError
from debtscan.protocols import Generation
from debtscan.utils import DEFAULT_OLLAMA_URL, post_json


class OllamaGenerator:
    """Non-streaming completions from a running Ollama server (``/api/generate``)."""

    DEFAULT_MODEL = "llama3.1"

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str = DEFAULT_OLLAMA_URL,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._model_name = model_name or self.DEFAULT_MODEL
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, prompt: str) -> Generation:
        """Send one prompt and return the full response text.

        Raises:
            ProviderError: on HTTP errors or a response without text
        """
        data = await post_json(
            f"{self._base_url}/api/generate",
            {"model": self._model_name, "prompt": prompt, "stream": False},
            timeout=self._timeout,
            client=self._client,
        )
        text = data.get("response")
        if not isinstance(text, str):
            raise ProviderError("Ollama response is missing the 'response' field")
        return Generation(text=text, done=bool(data.get("done", True)))
