"""Cell-value coercion shared by readers, validators and the read API."""

import math
from typing import Any, Optional

import pandas as pd

_NUMBER_NOISE = str.maketrans("", "", ",$%")


def to_float(value: Any) -> Optional[float]:
    """Parse a numeric cell; blank, non-numeric and NaN cells become ``None``.

    Thousands separators, ``$`` and ``%`` are ignored, so ``"1,234"`` → ``1234.0``
    and ``"85%"`` → ``85.0``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value).strip().translate(_NUMBER_NOISE)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_text(value: Any) -> Optional[str]:
    """Strip a text cell; blank cells become ``None``."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse a point in time, or ``None`` if it is blank or unparsable.

    Naive values are taken as UTC so that every parsed timestamp is comparable.
    """
    text = to_text(value)
    if text is None:
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce", utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed
