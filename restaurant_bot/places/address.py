from __future__ import annotations

import re

from opencc import OpenCC

# Some provider addresses come back in simplified Chinese
_converter = OpenCC("s2twp")

_LEADING_POSTAL_CODE_RE = re.compile(r"^\s*\d{3,6}")


def to_traditional(text: str) -> str:
    return _converter.convert(text) if text else text


def clean_address(address: str) -> str:
    """Convert to traditional Chinese, drop the country name and a leading postal code."""
    if not address:
        return ""
    cleaned = to_traditional(address).replace("臺灣", "").replace("台灣", "")
    cleaned = _LEADING_POSTAL_CODE_RE.sub("", cleaned)
    return cleaned.strip()
