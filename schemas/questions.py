# schemas/questions.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemas.exam import IrtParams, Modality


class QuestionOut(BaseModel):
    # public view: never exposes the answer key
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    id: str
    section_id: str
    prompt: str
    modality: Modality
    irt: Optional[IrtParams] = None
    expected_expression: Optional[str] = None
    variables: Optional[List[str]] = None
