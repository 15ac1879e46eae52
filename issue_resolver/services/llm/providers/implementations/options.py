"""Option bag normalisation shared by provider implementations"""

from typing import Any, Dict, Optional, Tuple

DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7

# Keys consumed by the dispatch layer, never forwarded to a backend
_INTERNAL_KEYS = {"maxTokens", "max_tokens", "temperature", "maxTurns"}


def split_options(
    options: Optional[Dict[str, Any]]
) -> Tuple[int, float, Dict[str, Any]]:
    """Return (max_tokens, temperature, passthrough) for an option bag

    Accepts both ``maxTokens`` and ``max_tokens`` spellings.
    """
    options = options or {}
    max_tokens = options.get("max_tokens", options.get("maxTokens")) or DEFAULT_MAX_TOKENS
    temperature = options.get("temperature")
    if temperature is None:
        temperature = DEFAULT_TEMPERATURE
    extra = {key: value for key, value in options.items() if key not in _INTERNAL_KEYS}
    return int(max_tokens), float(temperature), extra
