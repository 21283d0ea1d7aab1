from __future__ import annotations

import random as _rnd
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from bank import find_item, get_sections
from schemas.exam import Item, Section
from schemas.questions import QuestionOut

router = APIRouter(tags=["questions"])


def _out(section: Section, item: Item) -> QuestionOut:
    return QuestionOut(
        id=item.id,
        section_id=section.id,
        prompt=item.prompt,
        modality=item.modality,
        irt=item.irt,
        expected_expression=item.expected_expression,
        variables=item.variables,
    )


@router.get("/questions", response_model=List[QuestionOut])
def list_questions(
    section: Optional[str] = None,
    modality: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    random: bool = Query(default=False, description="If true, shuffle before limiting"),
):
    qs = [_out(s, it) for s in get_sections() for it in s.items]

    if section:
        qs = [q for q in qs if q.section_id == section]
    if modality:
        qs = [q for q in qs if q.modality == modality]

    if random:
        _rnd.shuffle(qs)

    if limit is not None:
        qs = qs[:limit]

    return qs


@router.get("/questions/{qid}", response_model=QuestionOut)
def get_question_detail(qid: str):
    found = find_item(qid)
    if not found:
        raise HTTPException(status_code=404, detail="question not found")
    return _out(*found)
