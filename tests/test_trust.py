"""Tests for trust-vote leadership: tally, expiry, tie-break, replacement."""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import NotFound, Unauthorized
from app.models import TrustVote
from app.services.memberships import leave_party
from app.services.trust import (
    Ballot, cast_vote, compute_leader, get_party_leader, is_party_leader, tally_votes,
    withdraw_vote,
)


def _now() -> datetime:
    return datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


def _ballots(*targets, start=None, ttl_days=90):
    """One ballot per target, a minute apart, in the order given."""
    start = start or _now() - timedelta(days=1)
    out = []
    for i, to in enumerate(targets):
        created = start + timedelta(minutes=i)
        out.append(Ballot(to_user_id=to, created_at=created,
                          expires_at=created + timedelta(days=ttl_days), id=i + 1))
    return out


class TestComputeLeader:
    def test_highest_tally_wins(self) -> None:
        ballots = _ballots(1, 2, 1, 2, 1)
        assert tally_votes(ballots, _now()) == {1: 3, 2: 2}
        assert compute_leader(ballots, _now()) == 1

    def test_no_votes_no_leader(self) -> None:
        assert compute_leader([], _now()) is None

    def test_tie_goes_to_first_to_reach_max(self) -> None:
        # 2 reaches two votes before 1 does
        ballots = _ballots(1, 2, 2, 1)
        assert tally_votes(ballots, _now()) == {1: 2, 2: 2}
        assert compute_leader(ballots, _now()) == 2

    def test_tie_break_ignores_input_order(self) -> None:
        ballots = _ballots(1, 2, 2, 1)
        assert compute_leader(list(reversed(ballots)), _now()) == 2

    def test_tie_does_not_double_count(self) -> None:
        ballots = _ballots(1, 2, 1, 2)
        tally = tally_votes(ballots, _now())
        assert sum(tally.values()) == 4
        assert compute_leader(ballots, _now()) == 1

    def test_expired_votes_never_count(self) -> None:
        old = _ballots(2, 2, 2, start=_now() - timedelta(days=200))
        fresh = _ballots(1)
        assert tally_votes(old + fresh, _now()) == {1: 1}
        assert compute_leader(old + fresh, _now()) == 1

    def test_vote_expiring_exactly_now_is_excluded(self) -> None:
        b = Ballot(to_user_id=1, created_at=_now() - timedelta(days=90), expires_at=_now(), id=1)
        assert compute_leader([b], _now()) is None

    def test_naive_timestamps_read_as_utc(self) -> None:
        created = (_now() - timedelta(days=1)).replace(tzinfo=None)
        b = Ballot(to_user_id=7, created_at=created, expires_at=created + timedelta(days=90), id=1)
        assert compute_leader([b], _now()) == 7


class TestCastVote:
    def test_recast_replaces_previous_vote(self, db, make_user, make_party) -> None:
        a, b, c = make_user(), make_user(), make_user()
        party = make_party([a, b, c])

        cast_vote(db, party.id, a, b.id)
        cast_vote(db, party.id, a, c.id)

        rows = db.query(TrustVote).filter_by(party_id=party.id, from_user_id=a.id).all()
        assert len(rows) == 1
        assert rows[0].to_user_id == c.id
        assert get_party_leader(db, party.id) == c.id

    def test_at_most_one_vote_after_every_step(self, db, make_user, make_party) -> None:
        users = [make_user() for _ in range(4)]
        party = make_party(users)
        voter = users[0]
        for target in [users[1], users[2], users[1], users[3], voter]:
            cast_vote(db, party.id, voter, target.id)
            assert db.query(TrustVote).filter_by(party_id=party.id, from_user_id=voter.id).count() == 1

    def test_expires_after_ttl(self, db, make_user, make_party) -> None:
        a, b = make_user(), make_user()
        party = make_party([a, b])
        vote = cast_vote(db, party.id, a, b.id, now=_now())
        assert vote.expires_at.replace(tzinfo=timezone.utc) - _now() == timedelta(days=90)

    def test_stale_row_never_counts(self, db, make_user, make_party) -> None:
        a, b = make_user(), make_user()
        party = make_party([a, b])
        long_ago = datetime.now(timezone.utc) - timedelta(days=120)
        db.add(TrustVote(party_id=party.id, from_user_id=a.id, to_user_id=b.id,
                         created_at=long_ago, expires_at=long_ago + timedelta(days=90)))
        db.commit()
        assert get_party_leader(db, party.id) is None

    def test_non_member_cannot_vote(self, db, make_user, make_party) -> None:
        a, outsider = make_user(), make_user()
        party = make_party([a])
        with pytest.raises(Unauthorized) as exc:
            cast_vote(db, party.id, outsider, a.id)
        assert exc.value.status_code == 403

    def test_target_must_be_member(self, db, make_user, make_party) -> None:
        a, outsider = make_user(), make_user()
        party = make_party([a])
        with pytest.raises(NotFound):
            cast_vote(db, party.id, a, outsider.id)

    def test_withdraw_without_vote(self, db, make_user, make_party) -> None:
        a = make_user()
        party = make_party([a])
        with pytest.raises(NotFound):
            withdraw_vote(db, party.id, a)

    def test_departed_member_loses_leadership(self, db, make_user, make_party) -> None:
        a, b, c = make_user(), make_user(), make_user()
        party = make_party([a, b, c])
        cast_vote(db, party.id, b, a.id)
        cast_vote(db, party.id, c, a.id)
        cast_vote(db, party.id, a, b.id)
        assert get_party_leader(db, party.id) == a.id

        leave_party(db, party.id, a)

        # votes for the leaver remain stored but no longer count
        assert db.query(TrustVote).filter_by(party_id=party.id, to_user_id=a.id).count() == 2
        assert get_party_leader(db, party.id) is None
        assert is_party_leader(db, party.id, a.id) is False

    def test_next_candidate_leads_after_departure(self, db, make_user, make_party) -> None:
        a, b, c = make_user(), make_user(), make_user()
        party = make_party([a, b, c])
        cast_vote(db, party.id, b, a.id)
        cast_vote(db, party.id, c, a.id)
        cast_vote(db, party.id, a, c.id)

        leave_party(db, party.id, a)
        assert get_party_leader(db, party.id) is None

        cast_vote(db, party.id, b, c.id)
        assert get_party_leader(db, party.id) == c.id


class TestTrustRoutes:
    def test_vote_and_leader(self, client, make_user, make_party, headers) -> None:
        a, b, c = make_user(), make_user(), make_user()
        party = make_party([a, b, c])

        assert client.post(f"/api/parties/{party.id}/trust", json={"to_user_id": c.id}, headers=headers(a)).status_code == 201
        assert client.post(f"/api/parties/{party.id}/trust", json={"to_user_id": c.id}, headers=headers(b)).status_code == 201

        body = client.get(f"/api/parties/{party.id}/leader").json()
        assert body["leader_id"] == c.id
        assert body["tally"] == {str(c.id): 2}

        members = client.get(f"/api/parties/{party.id}/members").json()
        by_id = {m["user_id"]: m for m in members}
        assert by_id[c.id]["is_leader"] is True
        assert by_id[c.id]["trust_votes"] == 2
        assert by_id[a.id]["trust_votes"] == 0

    def test_withdraw(self, client, make_user, make_party, headers) -> None:
        a, b = make_user(), make_user()
        party = make_party([a, b])
        client.post(f"/api/parties/{party.id}/trust", json={"to_user_id": b.id}, headers=headers(a))

        assert client.delete(f"/api/parties/{party.id}/trust", headers=headers(a)).json() == {"success": True}
        assert client.get(f"/api/parties/{party.id}/leader").json()["leader_id"] is None

        again = client.delete(f"/api/parties/{party.id}/trust", headers=headers(a))
        assert again.status_code == 404
        assert again.json()["kind"] == "not_found"

    def test_leaving_drops_own_vote(self, client, db, make_user, make_party, headers) -> None:
        a, b = make_user(), make_user()
        party = make_party([a, b])
        client.post(f"/api/parties/{party.id}/trust", json={"to_user_id": b.id}, headers=headers(a))

        assert client.post(f"/api/parties/{party.id}/leave", headers=headers(a)).status_code == 200
        assert db.query(TrustVote).filter_by(party_id=party.id, from_user_id=a.id).count() == 0

    def test_requires_auth(self, client, make_user, make_party) -> None:
        a = make_user()
        party = make_party([a])
        res = client.post(f"/api/parties/{party.id}/trust", json={"to_user_id": a.id})
        assert res.status_code == 401
        assert res.json()["kind"] == "unauthorized"
