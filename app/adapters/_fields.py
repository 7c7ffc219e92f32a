"""Field accessors shared by the upstream normalizers."""
from typing import Any, Mapping, Optional, Tuple

from app.core.errors import MalformedEventError


def require(raw: Mapping[str, Any], key: str, source: str) -> Any:
    value = raw.get(key) if isinstance(raw, Mapping) else None
    if value is None or value == "":
        raise MalformedEventError(source, f"record has no '{key}'")
    return value


def optional_str(value: Optional[Any]) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def optional_tags(value: Any) -> Optional[Tuple[str, ...]]:
    # Only list/tuple values are tag lists; a bare string is not.
    if not isinstance(value, (list, tuple)) or not value:
        return None
    return tuple(str(tag) for tag in value)
