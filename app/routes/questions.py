# app/routes/questions.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user, get_optional_user
from app.models.user import User
from app.schemas.question import QuestionIn, AnswerIn, QuestionOut, AnswerOut, QuestionWithAnswers
from app.services.questions import ask_question, answer_question, questions_for_party

router = APIRouter(prefix="/api", tags=["questions"])


@router.get("/parties/{party_id}/questions", response_model=List[QuestionWithAnswers])
def list_questions(party_id: int, db: Session = Depends(get_db)):
    return questions_for_party(db, party_id)


@router.post("/parties/{party_id}/questions", response_model=QuestionOut, status_code=201)
def ask(
    party_id: int,
    payload: QuestionIn,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    # Anyone may ask, signed in or not
    return ask_question(db, party_id, payload.question_text, user)


@router.post("/questions/{question_id}/answers", response_model=AnswerOut, status_code=201)
def answer(
    question_id: int,
    payload: AnswerIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return answer_question(db, question_id, payload.answer_text, user)
