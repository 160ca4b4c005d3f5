"""Staged recovery of JSON from model output.

Model responses are asked to be bare JSON but regularly arrive fenced in
markdown, wrapped in prose, or in a JavaScript-ish dialect (bare keys, single
quotes, trailing commas). ``recover`` applies cheap textual normalisation in a
fixed order and returns ``None`` when nothing parseable is left. It never
raises.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"`json|`", re.IGNORECASE)
_LEADING_NON_JSON_RE = re.compile(r"^[^{\[]*")
_BARE_KEY_RE = re.compile(r"(?<!\w)(\w+):")
_TRAILING_COMMA_RE = re.compile(r",(\s*[\]}])")
_LEADING_JUNK_RE = re.compile(r"^[^a-zA-Z0-9{\[]*")
_TRAILING_KEEP = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789}]")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def trim_to_json_bounds(text: str) -> str:
    text = _LEADING_NON_JSON_RE.sub("", text, count=1)
    return text[: max(text.rfind("}"), text.rfind("]")) + 1]


def extract_brace_block(text: str) -> str | None:
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last == -1 or last <= first:
        return None
    return text[first : last + 1]


def _strip_trailing_junk(text: str) -> str:
    end = len(text)
    while end and text[end - 1] not in _TRAILING_KEEP:
        end -= 1
    return text[:end]


def repair_syntax(text: str) -> str:
    # Blunt on purpose: apostrophes inside values become double quotes too.
    text = _BARE_KEY_RE.sub(r'"\1":', text)
    text = text.replace("'", '"')
    text = _TRAILING_COMMA_RE.sub(r"\1", text)
    text = _LEADING_JUNK_RE.sub("", text, count=1)
    return _strip_trailing_junk(text)


def recover(raw_model_text: Any) -> Any | None:
    if not isinstance(raw_model_text, str) or not raw_model_text.strip():
        return None

    cleaned = trim_to_json_bounds(strip_fences(raw_model_text))
    try:
        return _loads(cleaned)
    except (ValueError, RecursionError) as exc:
        logger.debug("json_recovery_direct_parse_failed len=%s: %s", len(cleaned), exc)

    block = extract_brace_block(cleaned)
    if block is None:
        logger.warning("json_recovery_no_object len=%s", len(raw_model_text))
        return None

    repaired = repair_syntax(block)
    try:
        return _loads(repaired)
    except (ValueError, RecursionError) as exc:
        logger.warning("json_recovery_failed len=%s: %s", len(repaired), exc)
        return None
