"""Extract and parse JSON embedded in free-text model replies"""

import json
import re
from typing import Any

from ..core.exceptions import ResponseParseError
from ..core.logger import CentralizedLogger

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```")
_OBJECT = re.compile(r"(\{[\s\S]*\})")
_ARRAY = re.compile(r"(\[[\s\S]*\])")

logger = CentralizedLogger("JsonParser")


def extract_json(text: str) -> str:
    """Return the JSON-looking part of a reply

    Tries a fenced code block first, then the widest ``{...}`` span, then
    the widest ``[...]`` span, and finally the trimmed text itself.
    """
    match = _FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()

    trimmed = text.strip()
    for pattern in (_OBJECT, _ARRAY):
        match = pattern.search(trimmed)
        if match:
            return match.group(1)

    return trimmed


def parse_json_response(text: str) -> Any:
    """Parse JSON that may be wrapped in markdown

    Raises:
        ResponseParseError: If no valid JSON could be decoded
    """
    clean = extract_json(text or "")
    try:
        return json.loads(clean)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse JSON: {e.msg}; content starts with: {clean[:200]!r}")
        raise ResponseParseError(f"Model response is not valid JSON: {e.msg}", clean) from e
