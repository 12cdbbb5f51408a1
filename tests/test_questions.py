"""Tests for public questions, member answers and Q&A metrics."""

from datetime import timedelta

import pytest

from app.core.errors import Unauthorized
from app.models import Answer, Question
from app.services.memberships import leave_party
from app.services.questions import answer_question, qa_metrics, response_time_hours


def test_anonymous_question(client, make_party) -> None:
    party = make_party()
    res = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "  When is the next meeting?  "})
    assert res.status_code == 201
    body = res.json()
    assert body["asked_by"] is None
    assert body["question_text"] == "When is the next meeting?"


def test_signed_in_question_records_asker(client, make_user, make_party, headers) -> None:
    party = make_party()
    asker = make_user(display_name="Ravi")
    res = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "Budget?"}, headers=headers(asker))
    assert res.json()["asked_by"] == asker.id

    listed = client.get(f"/api/parties/{party.id}/questions").json()
    assert listed[0]["asker_name"] == "Ravi"


def test_question_length_limits(client, make_party) -> None:
    party = make_party()
    assert client.post(f"/api/parties/{party.id}/questions", json={"question_text": ""}).status_code == 422
    assert client.post(f"/api/parties/{party.id}/questions", json={"question_text": "q" * 1001}).status_code == 422


def test_blank_question_rejected(client, make_party) -> None:
    party = make_party()
    res = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "   "})
    assert res.status_code == 422
    assert res.json()["kind"] == "validation_failed"
    assert client.get(f"/api/parties/{party.id}/questions").json() == []


def test_blank_answer_rejected(client, make_user, make_party, headers) -> None:
    member = make_user()
    party = make_party([member])
    qid = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "Why?"}).json()["id"]

    res = client.post(f"/api/questions/{qid}/answers", json={"answer_text": " \t "}, headers=headers(member))
    assert res.status_code == 422
    assert res.json()["kind"] == "validation_failed"
    assert client.get(f"/api/parties/{party.id}/questions").json()[0]["answers"] == []


def test_answer_is_trimmed(client, make_user, make_party, headers) -> None:
    member = make_user()
    party = make_party([member])
    qid = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "Why?"}).json()["id"]
    res = client.post(f"/api/questions/{qid}/answers", json={"answer_text": "  Because.  "}, headers=headers(member))
    assert res.json()["answer_text"] == "Because."


def test_question_for_missing_party(client) -> None:
    assert client.post("/api/parties/9999/questions", json={"question_text": "hello"}).status_code == 404


def test_only_members_answer(client, make_user, make_party, headers) -> None:
    member = make_user()
    party = make_party([member])
    qid = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "Why?"}).json()["id"]

    res = client.post(f"/api/questions/{qid}/answers", json={"answer_text": "Because."}, headers=headers(make_user()))
    assert res.status_code == 403

    res = client.post(f"/api/questions/{qid}/answers", json={"answer_text": "Because."}, headers=headers(member))
    assert res.status_code == 201
    assert res.json()["answered_by"] == member.id

    listed = client.get(f"/api/parties/{party.id}/questions").json()
    assert [a["answer_text"] for a in listed[0]["answers"]] == ["Because."]
    assert listed[0]["response_time_hours"] is not None


def test_answer_missing_question(client, make_user, headers) -> None:
    res = client.post("/api/questions/9999/answers", json={"answer_text": "x"}, headers=headers(make_user()))
    assert res.status_code == 404


def test_answer_requires_auth(client, make_party) -> None:
    party = make_party()
    qid = client.post(f"/api/parties/{party.id}/questions", json={"question_text": "Why?"}).json()["id"]
    assert client.post(f"/api/questions/{qid}/answers", json={"answer_text": "x"}).status_code == 401


def test_former_member_cannot_answer(db, make_user, make_party) -> None:
    member = make_user()
    party = make_party([member])
    q = Question(party_id=party.id, question_text="Still here?")
    db.add(q)
    db.commit()

    leave_party(db, party.id, member)

    with pytest.raises(Unauthorized):
        answer_question(db, q.id, "Yes", member)


def test_metrics(db, make_user, make_party) -> None:
    member = make_user()
    party = make_party([member])
    asked = [
        Question(party_id=party.id, question_text=f"Q{i}", created_at=party.created_at + timedelta(hours=i))
        for i in range(3)
    ]
    db.add_all(asked)
    db.commit()

    # answered after 2h and 4h; the third stays open
    db.add(Answer(question_id=asked[0].id, answered_by=member.id, answer_text="a",
                  created_at=asked[0].created_at + timedelta(hours=2)))
    db.add(Answer(question_id=asked[1].id, answered_by=member.id, answer_text="b",
                  created_at=asked[1].created_at + timedelta(hours=4)))
    db.commit()

    metrics = qa_metrics(db, party.id)
    assert metrics["total_questions"] == 3
    assert metrics["unanswered_questions"] == 1
    assert metrics["avg_response_time_hours"] == pytest.approx(3.0)


def test_response_time_uses_first_answer(db, make_user, make_party) -> None:
    member = make_user()
    party = make_party([member])
    q = Question(party_id=party.id, question_text="Q", created_at=party.created_at)
    db.add(q)
    db.commit()
    for hours in (5, 1):
        db.add(Answer(question_id=q.id, answered_by=member.id, answer_text="x",
                      created_at=q.created_at + timedelta(hours=hours)))
    db.commit()
    db.refresh(q)
    assert response_time_hours(q) == pytest.approx(1.0)
