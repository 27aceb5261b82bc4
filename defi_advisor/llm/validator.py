"""Response validation.

Model output is untrusted text. Free-text answers only need to be non-empty;
structured answers are parsed as a JSON object and then validated against a
pydantic model, so a "maybe-JSON" blob never reaches callers half-filled.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import EmptyResponseError, ParseError

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)


def require_text(text: Optional[str]) -> str:
    if text is None or not text.strip():
        raise EmptyResponseError()
    return text.strip()


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Parse a JSON object out of model output (optionally wrapped in a code fence)."""
    s = (text or "").strip()
    if not s:
        raise ParseError("Model returned empty content where JSON was expected.", raw_text=text)
    m = _FENCE_RE.match(s)
    if m:
        s = m.group(1).strip()
    try:
        obj = json.loads(s, strict=False)
    except json.JSONDecodeError as e:
        raise ParseError(f"Model output is not valid JSON: {e.msg}", raw_text=text) from e
    if not isinstance(obj, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(obj).__name__}.", raw_text=text
        )
    return obj


def parse_structured(text: Optional[str], model: Type[M]) -> M:
    obj = extract_json_object(text)
    try:
        return model.model_validate(obj)
    except ValidationError as e:
        raise ParseError(
            f"Model output does not match {model.__name__}: {e.error_count()} error(s).",
            raw_text=text,
        ) from e


__all__ = ["extract_json_object", "parse_structured", "require_text"]
