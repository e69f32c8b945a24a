"""Tests for the RSVP ledger."""
import pytest

from hangouts.errors import NotFound
from hangouts.models.participant import Participant
from hangouts.models.rsvp import RSVP, RSVPStatus
from hangouts.services import rsvp_ledger
from tests.conftest import make_user, make_poll_hangout


@pytest.fixture()
def group(db):
    alice = make_user(db, "alice")
    bob = make_user(db, "bob")
    carol = make_user(db, "carol")
    hangout, _ = make_poll_hangout(db, alice, invitees=[bob, carol])
    return hangout, alice, bob, carol


class TestBootstrap:
    def test_creates_pending_rows(self, db, group):
        hangout, alice, bob, carol = group
        created = rsvp_ledger.bootstrap(db, hangout.hangout_id, [alice.user_id, bob.user_id, carol.user_id])
        db.commit()

        assert len(created) == 3
        rows = rsvp_ledger.list_rsvps(db, hangout.hangout_id)
        assert all(r.status == RSVPStatus.pending for r in rows)
        assert all(r.responded_at is None for r in rows)

    def test_is_idempotent(self, db, group):
        """Running bootstrap again adds nothing and leaves answers alone."""
        hangout, alice, bob, carol = group
        ids = [alice.user_id, bob.user_id, carol.user_id]
        rsvp_ledger.bootstrap(db, hangout.hangout_id, ids)
        db.commit()
        rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.yes)

        assert rsvp_ledger.bootstrap(db, hangout.hangout_id, ids) == []
        db.commit()
        rows = db.query(RSVP).filter(RSVP.hangout_id == hangout.hangout_id).all()
        assert len(rows) == 3
        assert {r.user_id: r.status for r in rows}[bob.user_id] == RSVPStatus.yes

    def test_duplicate_ids_collapse(self, db, group):
        hangout, alice, _, _ = group
        created = rsvp_ledger.bootstrap(db, hangout.hangout_id, [alice.user_id, alice.user_id])
        assert len(created) == 1

    def test_partial_bootstrap_fills_gaps(self, db, group):
        hangout, alice, bob, carol = group
        rsvp_ledger.bootstrap(db, hangout.hangout_id, [alice.user_id])
        created = rsvp_ledger.bootstrap(db, hangout.hangout_id, [alice.user_id, bob.user_id, carol.user_id])
        assert sorted(r.user_id for r in created) == sorted([bob.user_id, carol.user_id])


class TestRespond:
    def test_answer_sets_responded_at(self, db, group):
        hangout, _, bob, _ = group
        rsvp = rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.maybe)
        assert rsvp.status == RSVPStatus.maybe
        assert rsvp.responded_at is not None

    def test_changing_answer_updates_same_row(self, db, group):
        hangout, _, bob, _ = group
        first = rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.yes)
        second = rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.no)
        assert first.rsvp_id == second.rsvp_id
        assert db.query(RSVP).filter(RSVP.user_id == bob.user_id).count() == 1

    def test_back_to_pending_clears_responded_at(self, db, group):
        hangout, _, bob, _ = group
        rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.yes)
        rsvp = rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.pending)
        assert rsvp.responded_at is None

    def test_mirrors_status_on_participant(self, db, group):
        hangout, _, _, carol = group
        rsvp_ledger.respond(db, hangout.hangout_id, carol.user_id, RSVPStatus.no)
        participant = (
            db.query(Participant)
            .filter(Participant.hangout_id == hangout.hangout_id, Participant.user_id == carol.user_id)
            .one()
        )
        assert participant.rsvp_status == RSVPStatus.no

    def test_outsider_is_joined(self, db, group):
        hangout, _, _, _ = group
        dave = make_user(db, "dave")
        rsvp_ledger.respond(db, hangout.hangout_id, dave.user_id, RSVPStatus.yes)
        assert db.query(Participant).filter(Participant.user_id == dave.user_id).count() == 1

    def test_unknown_hangout(self, db, group):
        _, alice, _, _ = group
        with pytest.raises(NotFound):
            rsvp_ledger.respond(db, "missing", alice.user_id, RSVPStatus.yes)


class TestAttendance:
    def test_summary_buckets(self, db, group):
        hangout, alice, bob, carol = group
        rsvp_ledger.bootstrap(db, hangout.hangout_id, [alice.user_id, bob.user_id, carol.user_id])
        db.commit()
        rsvp_ledger.respond(db, hangout.hangout_id, alice.user_id, RSVPStatus.yes)
        rsvp_ledger.respond(db, hangout.hangout_id, bob.user_id, RSVPStatus.maybe)

        summary = rsvp_ledger.summarize_attendance(rsvp_ledger.list_rsvps(db, hangout.hangout_id))
        assert summary["going"] == [alice.user_id]
        assert summary["maybe"] == [bob.user_id]
        assert summary["not_going"] == []
        assert summary["waiting"] == [carol.user_id]
        assert summary["responded"] == 2

    def test_mandatory_creator_blocks_until_yes(self, db, group):
        hangout, alice, _, _ = group
        status = rsvp_ledger.check_mandatory(db, hangout.hangout_id)
        assert status == {"can_proceed": False, "waiting_for": [alice.user_id]}

        rsvp_ledger.respond(db, hangout.hangout_id, alice.user_id, RSVPStatus.yes)
        assert rsvp_ledger.check_mandatory(db, hangout.hangout_id)["can_proceed"] is True
