from __future__ import annotations

import re
import unicodedata

import pandas as pd

_WS_RX = re.compile(r"\s+")


def normalize_key(value: object) -> str:
    """Canonical store key: uppercase, accents stripped, whitespace collapsed."""
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    s = unicodedata.normalize("NFD", str(value).upper())
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return _WS_RX.sub(" ", s).strip()
