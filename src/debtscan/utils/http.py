"""Small JSON-over-HTTP helper shared by the Ollama providers."""

from typing import Any

import httpx

from debtscan.errors import ProviderError

DEFAULT_OLLAMA_URL = "http://localhost:11434"


async def post_json(
    url: str,
    payload: dict[str, Any],
    timeout: float,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """POST ``payload`` as JSON and return the decoded JSON object.

    Uses ``client`` when given, otherwise a short-lived client.

    Raises:
        ProviderError: on transport errors, non-2xx status or a non-object body
    """
    try:
        if client is not None:
            response = await client.post(url, json=payload, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=payload)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise ProviderError(
            f"{url} failed with status {e.response.status_code}: {e.response.text}"
        ) from e
    except httpx.HTTPError as e:
        raise ProviderError(f"{url} request failed: {e}") from e
    except ValueError as e:
        raise ProviderError(f"{url} returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProviderError(f"{url} returned {type(data).__name__}, expected an object")
    return data
