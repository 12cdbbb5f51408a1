"""Tests for inter-party support and revocation."""

import pytest

from app.core.errors import InvalidOperation
from app.models import PartySupport
from app.services.supports import add_support, revoke_support, supports_for_party


@pytest.fixture
def led_party(make_user, make_party, make_leader):
    def _make():
        leader = make_user()
        party = make_party([leader])
        make_leader(party, leader)
        return party, leader
    return _make


def test_revocation_marks_support(db, led_party) -> None:
    a, a_lead = led_party()
    b, _ = led_party()
    c, c_lead = led_party()

    add_support(db, a.id, b.id, a_lead)
    add_support(db, c.id, b.id, c_lead)
    revoke_support(db, a.id, b.id, a_lead, reason="Changed priorities")

    flags = {row["support"].from_party_id: row["is_revoked"] for row in supports_for_party(db, b.id)}
    assert flags == {a.id: True, c.id: False}


def test_revocation_is_standing(db, led_party) -> None:
    a, a_lead = led_party()
    b, _ = led_party()
    add_support(db, a.id, b.id, a_lead)
    revoke_support(db, a.id, b.id, a_lead)
    add_support(db, a.id, b.id, a_lead)

    rows = supports_for_party(db, b.id)
    assert len(rows) == 2
    assert all(row["is_revoked"] for row in rows)


def test_repeat_support_is_kept(db, led_party) -> None:
    a, a_lead = led_party()
    b, _ = led_party()
    add_support(db, a.id, b.id, a_lead)
    add_support(db, a.id, b.id, a_lead)
    assert db.query(PartySupport).filter_by(from_party_id=a.id, to_party_id=b.id).count() == 2


def test_revocation_elsewhere_does_not_leak(db, led_party) -> None:
    a, a_lead = led_party()
    b, _ = led_party()
    c, _ = led_party()
    add_support(db, a.id, b.id, a_lead)
    add_support(db, a.id, c.id, a_lead)
    revoke_support(db, a.id, c.id, a_lead)

    assert [r["is_revoked"] for r in supports_for_party(db, b.id)] == [False]
    assert [r["is_revoked"] for r in supports_for_party(db, c.id)] == [True]


def test_self_support_rejected(db, led_party) -> None:
    a, a_lead = led_party()
    with pytest.raises(InvalidOperation):
        add_support(db, a.id, a.id, a_lead)


class TestSupportRoutes:
    def test_support_and_list(self, client, led_party, headers) -> None:
        a, a_lead = led_party()
        b, _ = led_party()

        res = client.post(f"/api/parties/{b.id}/support", json={"from_party_id": a.id}, headers=headers(a_lead))
        assert res.status_code == 201
        body = res.json()
        assert body["support_type"] == "explicit"
        assert body["target_type"] == "issue"
        assert body["target_id"] == b.id

        listed = client.get(f"/api/parties/{b.id}/supports").json()
        assert len(listed) == 1
        assert listed[0]["from_party"]["id"] == a.id
        assert listed[0]["is_revoked"] is False

        res = client.post(f"/api/parties/{b.id}/revoke", json={"from_party_id": a.id, "reason": "no"}, headers=headers(a_lead))
        assert res.status_code == 201
        assert res.json()["revoking_party_id"] == a.id
        assert client.get(f"/api/parties/{b.id}/supports").json()[0]["is_revoked"] is True

    def test_only_leader_supports(self, client, led_party, add_members, headers) -> None:
        a, _ = led_party()
        b, _ = led_party()
        (member,) = add_members(a, 1)
        res = client.post(f"/api/parties/{b.id}/support", json={"from_party_id": a.id}, headers=headers(member))
        assert res.status_code == 403
        assert res.json()["kind"] == "unauthorized"

    def test_self_support_over_http(self, client, led_party, headers) -> None:
        a, a_lead = led_party()
        res = client.post(f"/api/parties/{a.id}/support", json={"from_party_id": a.id}, headers=headers(a_lead))
        assert res.status_code == 400
        assert res.json()["kind"] == "invalid_operation"

    def test_bad_support_type(self, client, led_party, headers) -> None:
        a, a_lead = led_party()
        b, _ = led_party()
        res = client.post(
            f"/api/parties/{b.id}/support",
            json={"from_party_id": a.id, "support_type": "grudging"},
            headers=headers(a_lead),
        )
        assert res.status_code == 422
