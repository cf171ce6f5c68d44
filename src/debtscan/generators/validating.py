"""Schema-validated generation with bounded retries."""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError

from debtscan.errors import ValidationExhaustedError
from debtscan.protocols import GenerationProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds, multiplied by the attempt number


class RetryPhase(str, Enum):
    """Phases of one ``validate_with_retry`` call."""

    ATTEMPTING = "attempting"
    VALIDATING = "validating"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


def extract_json_object(text: str) -> Any:
    """Return the first top-level JSON object embedded in ``text``.

    Raises:
        ValueError: if no decodable object is found
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
            return value
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
    raise ValueError("no JSON object found in output")


def parse_json_output(text: str) -> Any:
    """Default transform: whole-text JSON, else an embedded object, else the text."""
    stripped = text.strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass
    try:
        return extract_json_object(stripped)
    except ValueError:
        return text


def describe_schema(schema: Any) -> str:
    """Render a schema as JSON Schema text for retry prompts."""
    try:
        return json.dumps(TypeAdapter(schema).json_schema(), indent=2)
    except Exception:  # schemas pydantic cannot render still validate fine
        return getattr(schema, "__name__", repr(schema))


def enhance_prompt(prompt: str, error: str, schema: Any) -> str:
    """Append the schema and the last validation error to steer the next attempt."""
    return (
        f"{prompt}\n\n"
        "IMPORTANT: The previous response did not match the required schema. "
        "Respond with JSON that strictly follows this schema:\n"
        f"{describe_schema(schema)}\n\n"
        f"Error from previous attempt: {error}\n"
        "Return only the JSON, with no surrounding prose."
    )


class ValidatingGenerator:
    """Wraps a generation provider with validation, retry and backoff.

    Each call walks ATTEMPTING -> VALIDATING -> SUCCEEDED, or on failure
    RETRYING -> ATTEMPTING until the attempt budget runs out (EXHAUSTED).
    Backoff is linear: ``retry_delay * attempt`` seconds after attempt n.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.provider = provider
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def validate_with_retry(
        self,
        prompt: str,
        schema: type[T] | Any,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        transform: Callable[[str], Any] = parse_json_output,
    ) -> T:
        """Generate until the output validates against ``schema``.

        Args:
            prompt: Initial prompt
            schema: Anything pydantic's TypeAdapter accepts (a BaseModel
                subclass, ``str``, ``list[int]``...)
            max_retries: Total attempts allowed (defaults to the instance value)
            retry_delay: Base backoff in seconds (defaults to the instance value)
            transform: Maps raw text to the value being validated

        Returns:
            The validated value

        Raises:
            ValidationExhaustedError: after ``max_retries`` failed attempts
            ValueError: if ``max_retries`` is less than 1
        """
        attempts_allowed = self.max_retries if max_retries is None else max_retries
        delay = self.retry_delay if retry_delay is None else retry_delay
        if attempts_allowed < 1:
            raise ValueError(f"max_retries must be at least 1, got {attempts_allowed}")

        adapter = TypeAdapter(schema)
        current_prompt = prompt
        attempt = 1
        raw = ""
        last_error = ""
        invalid_output = False
        result: Any = None
        phase = RetryPhase.ATTEMPTING

        while True:
            if phase is RetryPhase.ATTEMPTING:
                try:
                    raw = (await self.provider.generate(current_prompt)).text
                    phase = RetryPhase.VALIDATING
                except Exception as e:
                    last_error = f"{type(e).__name__}: {e}"
                    invalid_output = False
                    phase = self._after_failure(attempt, attempts_allowed, last_error)

            elif phase is RetryPhase.VALIDATING:
                try:
                    result = adapter.validate_python(transform(raw))
                    phase = RetryPhase.SUCCEEDED
                except (ValidationError, ValueError, TypeError) as e:
                    last_error = str(e)
                    invalid_output = True
                    phase = self._after_failure(attempt, attempts_allowed, last_error)

            elif phase is RetryPhase.RETRYING:
                await self._sleep(delay * attempt)
                if invalid_output:
                    current_prompt = enhance_prompt(prompt, last_error, schema)
                attempt += 1
                phase = RetryPhase.ATTEMPTING

            elif phase is RetryPhase.SUCCEEDED:
                if attempt > 1:
                    logger.info(f"Output validated on attempt {attempt}")
                return result

            else:
                raise ValidationExhaustedError(attempt, last_error)

    @staticmethod
    def _after_failure(attempt: int, allowed: int, error: str) -> RetryPhase:
        logger.warning(f"Validation attempt {attempt}/{allowed} failed: {error}")
        if attempt < allowed:
            return RetryPhase.RETRYING
        return RetryPhase.EXHAUSTED
