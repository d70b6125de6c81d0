"""Defensive parsing of the AI endpoint's free-form text answer.

The model is asked for ``{"matches": [title, ...]}`` and nothing else, but
providers do not enforce it. The fallback chain is:

    1) parse the whole text as JSON;
    2) parse the first ``{`` ... last ``}`` span of the text;
    3) give up and report no matches.

Anything that parses but does not have the expected shape also counts as no
matches.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

_BRACED_RE = re.compile(r"\{[\s\S]*\}")


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def extract_json_object(raw: str) -> Optional[Any]:
    parsed = _loads(raw)
    if parsed is not None:
        return parsed
    match = _BRACED_RE.search(raw or "")
    if match:
        return _loads(match.group(0))
    return None


def parse_matches(raw: str, limit: int = 5) -> List[str]:
    """Return up to ``limit`` distinct titles in the order the model gave them."""
    parsed = extract_json_object(raw)
    if not isinstance(parsed, dict):
        if raw and raw.strip():
            logger.warning("AI response was not a JSON object; treating as no matches: %r", raw[:200])
        return []
    matches = parsed.get("matches")
    if not isinstance(matches, list):
        return []

    titles: List[str] = []
    for item in matches:
        if isinstance(item, str) and item not in titles:
            titles.append(item)
        if len(titles) >= limit:
            break
    return titles
