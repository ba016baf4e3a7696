from __future__ import annotations

import re

_SEPARATORS = re.compile(r"/+")


def normalize_secret_path(path: str) -> str:
    """``"a//b/"`` -> ``"/a/b"``; empty input is the root ``"/"``."""
    cleaned = _SEPARATORS.sub("/", "/" + (path or "").strip())
    if len(cleaned) > 1:
        cleaned = cleaned.rstrip("/")
    return cleaned
