# schemas/exam.py
from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

THETA_MIN, THETA_MAX = -3.0, 3.0

Modality = Literal["verbal", "quant", "reading", "listening", "speaking", "writing"]


class _Frozen(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class IrtParams(_Frozen):
    a: float = Field(gt=0)
    b: float
    c: Optional[float] = Field(default=None, ge=0, lt=1)


class NumericKey(_Frozen):
    type: Literal["numeric"] = "numeric"
    value: float
    tolerance: float = Field(default=0.0, ge=0)


class ExpressionKey(_Frozen):
    type: Literal["expression"] = "expression"
    value: str
    variables: Optional[List[str]] = None


AnswerKey = Annotated[Union[NumericKey, ExpressionKey], Field(discriminator="type")]


class Item(_Frozen):
    id: str
    prompt: str
    modality: Modality
    irt: Optional[IrtParams] = None
    answer_key: Optional[AnswerKey] = None
    # optional STEM validation hint, also the fallback variable list for scoring
    expected_expression: Optional[str] = None
    variables: Optional[List[str]] = None


class Section(_Frozen):
    id: str
    title: str
    items: List[Item] = Field(default_factory=list)


class ResponseRecord(_Frozen):
    answer: str
    ts: str
    # None means the answer could not be scored
    correct: Optional[bool] = None

    @property
    def indeterminate(self) -> bool:
        return self.correct is None


class SessionSnapshot(_Frozen):
    """
    Full resumable state of one exam session.
    Serialized as-is to local storage and to the heartbeat endpoint.
    """

    session_id: str
    sections: List[Section]
    theta_by_section_id: Dict[str, float] = Field(default_factory=dict)
    active_section_index: int = 0
    active_item_index: int = 0
    responses: Dict[str, ResponseRecord] = Field(default_factory=dict)
    draft_answer: str = ""
    last_local_persisted_at: int = 0
    last_heartbeat_attempt_at: Optional[int] = None

    @field_validator("theta_by_section_id")
    @classmethod
    def _clamp_theta(cls, v: Dict[str, float]) -> Dict[str, float]:
        return {k: min(max(t, THETA_MIN), THETA_MAX) for k, t in v.items()}
