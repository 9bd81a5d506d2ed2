from __future__ import annotations

import copy
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import ParseError


logger = logging.getLogger(__name__)

OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")
ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")
CODE_FENCE = re.compile(r"```[A-Za-z0-9_-]*")

JSONValue = Union[Dict[str, Any], List[Any]]


def extract_first_json_span(text: str, array: bool = False) -> Optional[str]:
    """Return the text from the first ``{`` to the last ``}`` (``[``/``]`` for arrays).

    This is a greedy span, not a bracket-balance scan: prose containing a
    closing brace after the JSON widens the span and the later parse fails.
    """
    match = (ARRAY_SPAN if array else OBJECT_SPAN).search(text or "")
    return match.group(0) if match else None


def parse_required(text: str, array: bool = False) -> JSONValue:
    """Extract and decode the embedded JSON value or raise ``ParseError``."""
    span = extract_first_json_span(text, array=array)
    kind = "array" if array else "object"
    if span is None:
        raise ParseError(f"No JSON {kind} found in provider response")
    try:
        value = json.loads(span)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON {kind} in provider response: {exc.msg}") from exc
    if not isinstance(value, list if array else dict):
        raise ParseError(f"Provider response JSON is not an {kind}")
    return value


def parse_with_defaults(text: str, default: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow-merge the embedded JSON object over ``default``.

    Parsed keys win; keys absent from the parsed object keep their default.
    Any failure returns a copy of ``default`` and is logged, never raised.
    """
    merged = copy.deepcopy(dict(default))
    try:
        parsed = parse_required(text)
    except ParseError as exc:
        logger.warning(f"{exc}. Using default response.")
        return merged

    merged.update(_present(parsed))
    return merged


def merge_over(default: Mapping[str, Any], value: Any) -> Dict[str, Any]:
    """Shallow-merge ``value`` over a copy of ``default`` when it is a mapping."""
    merged = copy.deepcopy(dict(default))
    if isinstance(value, Mapping):
        merged.update(_present(value))
    return merged


def _present(value: Mapping[str, Any]) -> Dict[str, Any]:
    # JSON null counts as absent
    return {key: item for key, item in value.items() if item is not None}


def strip_code_fences(text: str) -> str:
    return CODE_FENCE.sub("", text or "").strip()
