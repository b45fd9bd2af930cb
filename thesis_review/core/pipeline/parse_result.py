"""
Tagged parse results for model output.

Every model response is parsed into either ``Ok(value)`` or
``Degraded(value, error)`` where ``value`` is a deterministic fallback.
Call sites branch on the tag instead of wrapping parsing in try/except.

Dependencies: pydantic
System role: Model-output parsing with explicit degradation
"""

import json
import re
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successfully parsed value."""

    value: T

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    """Fallback value plus the reason the real value was unavailable."""

    value: T
    error: str

    @property
    def degraded(self) -> bool:
        return True


ParseResult = Ok[T] | Degraded[T]


def extract_json_object(text: str) -> dict:
    """
    Pull the first JSON object out of a model response.

    Handles markdown code fences and prose around the object.

    Raises:
        ValueError: No JSON object could be decoded
    """
    candidate = text.strip()
    fenced = _FENCE_RE.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("No JSON object found in response")
        try:
            data = json.loads(candidate[start : end + 1])
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_model_output(
    text: str,
    model: type[ModelT],
    fallback: Callable[[], ModelT],
) -> Ok[ModelT] | Degraded[ModelT]:
    """
    Parse a model response into ``model``.

    Args:
        text: Raw model response
        model: Pydantic model describing the expected JSON
        fallback: Builds the deterministic substitute on failure

    Returns:
        Ok with the validated model, or Degraded with the fallback
    """
    try:
        data = extract_json_object(text)
        return Ok(model.model_validate(data))
    except (ValueError, ValidationError) as e:
        return Degraded(fallback(), f"{type(e).__name__}: {e}")
