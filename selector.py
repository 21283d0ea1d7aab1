# selector.py

from __future__ import annotations

from typing import AbstractSet

from schemas.exam import Section


def select_next_index(section: Section, theta: float, answered_ids: AbstractSet[str]) -> int:
    """
    Index of the next item to administer in ``section``.

    Unanswered items without IRT parameters win immediately. Otherwise the item
    whose difficulty is nearest to theta is chosen, earliest first on ties.
    Returns 0 when every item is answered; use ``section_complete`` to detect that.
    """
    best_index = 0
    best_distance = float("inf")

    for i, item in enumerate(section.items):
        if item.id in answered_ids:
            continue
        if item.irt is None:
            return i
        distance = abs(item.irt.b - theta)
        if distance < best_distance:
            best_distance = distance
            best_index = i

    return best_index


def section_complete(section: Section, answered_ids: AbstractSet[str]) -> bool:
    return all(item.id in answered_ids for item in section.items)
