# scoring.py

from __future__ import annotations

import math
import re
from typing import Optional

from algebra import equivalent
from schemas.exam import ExpressionKey, Item, NumericKey

_DEFAULT_VARIABLES = ["x"]

# plain decimal with optional exponent; no "1_000", "inf" or "nan"
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _score_numeric(key: NumericKey, answer: str) -> Optional[bool]:
    raw = answer.strip()
    if not raw:
        return None
    if not _DECIMAL_RE.fullmatch(raw):
        return False
    n = float(raw)
    if not math.isfinite(n):
        return False
    return abs(n - key.value) <= key.tolerance


def _score_expression(item: Item, key: ExpressionKey, answer: str) -> bool:
    variables = key.variables
    if variables is None:
        variables = item.variables if item.variables is not None else _DEFAULT_VARIABLES
    return equivalent(key.value, answer, variables)


def score_item(item: Item, answer: str) -> Optional[bool]:
    """
    True/False verdict for ``answer``, or None when the item cannot be scored
    (no answer key, or a blank numeric answer).
    """
    key = item.answer_key
    if key is None:
        return None
    if isinstance(key, NumericKey):
        return _score_numeric(key, answer)
    return _score_expression(item, key, answer)
