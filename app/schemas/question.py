# app/schemas/question.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, field_validator

QUESTION_TEXT_MAX = 1000
ANSWER_TEXT_MAX = 2000


def _clean_text(v: str, limit: int, what: str) -> str:
    v = v.strip()
    if not v or len(v) > limit:
        raise ValueError(f"{what} is required and must be {limit} characters or less")
    return v


class QuestionIn(BaseModel):
    question_text: str

    @field_validator("question_text")
    @classmethod
    def _strip_question(cls, v: str) -> str:
        return _clean_text(v, QUESTION_TEXT_MAX, "Question")


class AnswerIn(BaseModel):
    answer_text: str

    @field_validator("answer_text")
    @classmethod
    def _strip_answer(cls, v: str) -> str:
        return _clean_text(v, ANSWER_TEXT_MAX, "Answer")


class AnswerOut(BaseModel):
    id: int
    question_id: int
    answered_by: Optional[int] = None
    answerer_name: Optional[str] = None
    answer_text: str
    created_at: datetime
    class Config: from_attributes = True


class QuestionOut(BaseModel):
    id: int
    party_id: int
    asked_by: Optional[int] = None
    asker_name: Optional[str] = None
    question_text: str
    created_at: datetime
    class Config: from_attributes = True


class QuestionWithAnswers(QuestionOut):
    answers: List[AnswerOut] = []
    response_time_hours: Optional[float] = None
