from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_ALNUM = re.compile(r"[^0-9a-zA-Z]+")


def clean_name(name: Any) -> str:
    """Canonicalize a header into a lowercase snake_case identifier."""
    text = str(name).strip().replace("%", " percent ").replace("#", " number ")
    text = _CAMEL_BOUNDARY.sub("_", text)
    text = _NON_ALNUM.sub("_", text).strip("_").lower()
    if not text:
        return "x"
    if text[0].isdigit():
        return f"x{text}"
    return text


def clean_names(names: Iterable[Any]) -> List[str]:
    """Clean every header and suffix duplicates with `_2`, `_3`, ... in encounter order."""
    seen: Dict[str, int] = {}
    cleaned: List[str] = []
    for name in names:
        base = clean_name(name)
        count = seen.get(base, 0) + 1
        seen[base] = count
        cleaned.append(base if count == 1 else f"{base}_{count}")
    return cleaned


def strip_suffix(name: str, suffix: str) -> str:
    """Remove `suffix` from the end of `name` when present."""
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return name
