from typing import Any, Optional


def blank_to_none(value: Any) -> Optional[Any]:
    """Treat an empty or whitespace-only string id as "no value"."""
    if isinstance(value, str) and not value.strip():
        return None
    return value
