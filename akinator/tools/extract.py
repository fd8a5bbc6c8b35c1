from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

_THINK_BLOCK = re.compile(r"<think>[\s\S]*?</think>", re.IGNORECASE)
_CODE_FENCE = re.compile(r"```[A-Za-z0-9_+-]*")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^']*)'")
_CURLY_QUOTES = re.compile(r"[“”]")


def _strip_noise(text: str) -> str:
    stripped = _THINK_BLOCK.sub("", text)
    stripped = _CODE_FENCE.sub("", stripped)
    return stripped.strip()


def _extract_json_segment(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start: end + 1]


def _repair(segment: str) -> str:
    cleaned = _TRAILING_COMMA.sub(r"\1", segment)
    cleaned = _SINGLE_QUOTED_VALUE.sub(lambda m: ': "' + m.group(1) + '"', cleaned)
    return _CURLY_QUOTES.sub('"', cleaned)


def _loads(segment: str) -> Any:
    try:
        return json.loads(segment)
    except (ValueError, RecursionError):
        return None


def extract_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Pull a JSON object out of a free-form model completion.

    Reasoning blocks and markdown fences are dropped, then everything from the
    first ``{`` to the last ``}`` is parsed. A second attempt fixes trailing
    commas, single-quoted values and curly quotes. Returns ``None`` instead of
    raising when nothing usable is found.
    """
    if not text:
        return None

    cleaned = _strip_noise(str(text))
    segment = _extract_json_segment(cleaned)
    if segment is None:
        return None

    parsed = _loads(segment)
    if parsed is None:
        parsed = _loads(_repair(segment))
        if parsed is None:
            logger.error("Failed to parse JSON: %s", cleaned)
            return None

    if not isinstance(parsed, dict):
        return None
    return parsed
