# File: hearing_scribe/features/formatting/service/response_parser.py
import json
import logging
import re
from typing import Any, Callable, List, Optional

from ..domain.models import CorrectionUpdate

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_EMBEDDED_ARRAY = re.compile(r"\[[\s\S]*\]")


def _bare(response: str) -> Any:
    return json.loads(response)


def _fenced(response: str) -> Any:
    match = _FENCED_BLOCK.search(response)
    if not match or not match.group(1).strip():
        return None
    return json.loads(match.group(1).strip())


def _embedded(response: str) -> Any:
    # Greedy: first '[' to last ']'
    match = _EMBEDDED_ARRAY.search(response)
    if not match:
        return None
    return json.loads(match.group(0))


# Tried in this order; the first one that yields a list wins
STRATEGIES: List[Callable[[str], Any]] = [_bare, _fenced, _embedded]


def extract_json_array(response: str) -> Optional[List[Any]]:
    """
    Pulls a JSON array out of a model reply.
    Accepts a bare array, an array inside a ``` fenced block, or an array inside prose.
    Returns None when nothing parses as an array.
    """
    if not isinstance(response, str) or not response.strip():
        return None

    for strategy in STRATEGIES:
        try:
            parsed = strategy(response)
        except ValueError:
            continue
        if isinstance(parsed, list):
            return parsed

    logger.warning(f"Could not parse LLM response as array. Raw: {response[:500]!r}")
    return None


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def to_updates(items: List[Any]) -> List[CorrectionUpdate]:
    """
    Converts parsed items to updates. Items without an id, or with nothing
    to change, are dropped. 'speaker' is accepted as an alias of 'speaker_label'.
    """
    updates = []
    for item in items:
        if not isinstance(item, dict) or item.get("id") in (None, ""):
            continue
        label = _clean(item.get("speaker_label", item.get("speaker")))
        text = _clean(item.get("text"))
        if label is None and text is None:
            continue
        updates.append(CorrectionUpdate(id=str(item["id"]), speaker_label=label, text=text))
    return updates


def parse_correction_response(response: str) -> List[CorrectionUpdate]:
    """Unparseable replies yield no updates."""
    items = extract_json_array(response)
    if items is None:
        return []
    return to_updates(items)
