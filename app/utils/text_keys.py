"""
Deterministic keys derived from free-form labels
"""

import re
from typing import Any

TOTAL_TOKEN = "SKUPAJ"

# Slovenian / Croatian letters that have no NFKD decomposition worth relying on
_FOLD = str.maketrans({
    "Č": "C", "Š": "S", "Ž": "Z", "Đ": "D", "Ć": "C",
    "č": "c", "š": "s", "ž": "z", "đ": "d", "ć": "c",
})

_WHITESPACE = re.compile(r"\s+")
_NON_TOKEN_UPPER = re.compile(r"[^A-Z0-9_]+")
_NON_TOKEN_LOWER = re.compile(r"[^a-z0-9_]+")
_UNDERSCORES = re.compile(r"_+")


def safe_str(value: Any) -> str:
    return ("" if value is None else str(value)).strip()


def _clean(value: Any, upper: bool) -> str:
    text = safe_str(value)
    text = text.upper() if upper else text.lower()
    text = _WHITESPACE.sub("_", text).translate(_FOLD)
    text = (_NON_TOKEN_UPPER if upper else _NON_TOKEN_LOWER).sub("_", text)
    return _UNDERSCORES.sub("_", text).strip("_")


def derive_key(species: Any, class_label: Any) -> str:
    """
    Join key between quota plan line items and hunt-log harvest items.

    "srna", "mladiči moškega spola" -> "SRNA__MLADICI_MOSKEGA_SPOLA"
    An empty class label stands for the species total ("SRNA__SKUPAJ").
    """
    return f"{_clean(species, upper=True)}__{_clean(class_label, upper=True) or TOTAL_TOKEN}"


def point_document_id(ld_id: Any, point_id: Any) -> str:
    """Stable store id for an imported point of interest"""
    return f"{_clean(ld_id, upper=False)}__{_clean(point_id, upper=False)}"


def normalize_label(value: Any) -> str:
    """Lower-case, underscore-joined, č/š/ž folded; used for point types"""
    return _WHITESPACE.sub("_", safe_str(value).lower()).translate(_FOLD)
