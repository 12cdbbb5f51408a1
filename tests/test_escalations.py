"""Tests for issue escalation and the escalation trail."""

import pytest

from app.core.errors import NotFound, Unauthorized
from app.services.escalations import escalate, escalation_trail


@pytest.fixture
def led_party(make_user, make_party, make_leader):
    def _make():
        leader = make_user()
        party = make_party([leader])
        make_leader(party, leader)
        return party, leader
    return _make


def test_trail_starts_at_source(db, led_party, add_members) -> None:
    src, lead = led_party()
    t1, _ = led_party()
    t2, _ = led_party()
    add_members(t2, 11)

    escalate(db, src.id, t1.id, lead)
    escalate(db, src.id, t2.id, lead)

    trail = escalation_trail(db, src.id)
    assert [node["party"].id for node in trail] == [src.id, t1.id, t2.id]
    assert trail[0]["escalated_at"] is None
    assert all(node["escalated_at"] is not None for node in trail[1:])
    assert trail[2]["member_count"] == 12
    assert trail[2]["level"] == 2


def test_duplicates_allowed(db, led_party) -> None:
    src, lead = led_party()
    t1, _ = led_party()
    escalate(db, src.id, t1.id, lead)
    escalate(db, src.id, t1.id, lead)
    assert [n["party"].id for n in escalation_trail(db, src.id)] == [src.id, t1.id, t1.id]


def test_non_leader_refused(db, led_party, add_members) -> None:
    src, _ = led_party()
    t1, _ = led_party()
    (member,) = add_members(src, 1)
    with pytest.raises(Unauthorized):
        escalate(db, src.id, t1.id, member)


def test_missing_target(db, led_party) -> None:
    src, lead = led_party()
    with pytest.raises(NotFound):
        escalate(db, src.id, 9999, lead)


def test_routes(client, led_party, headers) -> None:
    src, lead = led_party()
    t1, _ = led_party()

    res = client.post(f"/api/parties/{src.id}/escalations", json={"target_party_id": t1.id}, headers=headers(lead))
    assert res.status_code == 201
    assert res.json()["target_party_id"] == t1.id

    trail = client.get(f"/api/parties/{src.id}/escalations").json()
    assert [n["party"]["id"] for n in trail] == [src.id, t1.id]
    assert trail[1]["level"] == 1

    assert client.get("/api/parties/9999/escalations").status_code == 404
