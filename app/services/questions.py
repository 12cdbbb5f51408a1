# app/services/questions.py
from __future__ import annotations
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.clock import as_utc
from app.core.errors import NotFound, Unauthorized
from app.models.question import Question, Answer
from app.models.user import User
from app.services.memberships import get_party_or_404, is_active_member

logger = logging.getLogger("openpolitics.questions")
logger.setLevel(logging.INFO)


def ask_question(db: Session, party_id: int, text: str, asker: Optional[User] = None) -> Question:
    get_party_or_404(db, party_id)
    row = Question(party_id=party_id, asked_by=asker.id if asker else None, question_text=text)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Question {row.id} asked in party {party_id}")
    return row


def answer_question(db: Session, question_id: int, text: str, answerer: User) -> Answer:
    question = db.query(Question).filter(Question.id == question_id).first()
    if not question:
        raise NotFound("Question not found")
    if not is_active_member(db, question.party_id, answerer.id):
        raise Unauthorized.forbidden("Only party members can answer questions")

    row = Answer(question_id=question_id, answered_by=answerer.id, answer_text=text)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Question {question_id} answered by user {answerer.id}")
    return row


def _display(user: Optional[User]) -> Optional[str]:
    if user is None:
        return None
    return user.display_name or user.username


def response_time_hours(question: Question) -> Optional[float]:
    if not question.answers:
        return None
    first = min(question.answers, key=lambda a: (as_utc(a.created_at), a.id))
    delta = as_utc(first.created_at) - as_utc(question.created_at)
    return delta.total_seconds() / 3600


def questions_for_party(db: Session, party_id: int) -> List[dict]:
    get_party_or_404(db, party_id)
    questions = (
        db.query(Question)
        .options(
            joinedload(Question.asker),
            selectinload(Question.answers).joinedload(Answer.answerer),
        )
        .filter(Question.party_id == party_id)
        .order_by(Question.created_at.desc(), Question.id.desc())
        .all()
    )
    out = []
    for q in questions:
        answers = sorted(q.answers, key=lambda a: (as_utc(a.created_at), a.id))
        out.append({
            "id": q.id,
            "party_id": q.party_id,
            "asked_by": q.asked_by,
            "asker_name": _display(q.asker),
            "question_text": q.question_text,
            "created_at": q.created_at,
            "answers": [
                {
                    "id": a.id,
                    "question_id": a.question_id,
                    "answered_by": a.answered_by,
                    "answerer_name": _display(a.answerer),
                    "answer_text": a.answer_text,
                    "created_at": a.created_at,
                }
                for a in answers
            ],
            "response_time_hours": response_time_hours(q),
        })
    return out


def qa_metrics(db: Session, party_id: int) -> dict:
    questions = (
        db.query(Question)
        .options(selectinload(Question.answers))
        .filter(Question.party_id == party_id)
        .all()
    )
    times = [t for t in (response_time_hours(q) for q in questions) if t is not None]
    return {
        "total_questions": len(questions),
        "unanswered_questions": sum(1 for q in questions if not q.answers),
        "avg_response_time_hours": (sum(times) / len(times)) if times else None,
    }
