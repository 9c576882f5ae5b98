from __future__ import annotations

import json

import pytest
from sqlalchemy.orm import Session

from hamlet.game import ledger, registry
from hamlet.game.clock import ManualClock
from hamlet.game.errors import InsufficientFunds, NotOwner, TokenAlreadyMinted, VillageNotFound
from hamlet.game.notifications import MailboxSink, VillageCreated
from hamlet.game.villages import create_village
from hamlet.models.mail_message import MailMessage


def test_mint_binds_owner_once(db: Session, make_user, clock: ManualClock) -> None:
    alice = make_user("alice")
    v = create_village(db, name="Ashford", description="", now=clock.now())
    registry.mint(db, village_id=v.id, owner_id=alice.id, now=clock.now())
    db.commit()

    assert registry.owner_of(db, v.id) == alice.id
    assert registry.is_owner(db, village_id=v.id, actor_id=alice.id)
    assert registry.villages_owned_by(db, alice.id) == [v.id]

    with pytest.raises(TokenAlreadyMinted):
        registry.mint(db, village_id=v.id, owner_id=alice.id, now=clock.now())


def test_owner_of_unminted_village_is_none(db: Session) -> None:
    assert registry.owner_of(db, 5) is None
    assert not registry.is_owner(db, village_id=5, actor_id=1)


def test_transfer_moves_ownership(db: Session, make_user, clock: ManualClock) -> None:
    alice = make_user("alice")
    bob = make_user("bob")
    v = create_village(db, name="Ashford", description="", now=clock.now())
    registry.mint(db, village_id=v.id, owner_id=alice.id, now=clock.now())
    db.commit()

    clock.advance(30)
    token = registry.transfer(db, village_id=v.id, from_id=alice.id, to_id=bob.id, now=clock.now())
    db.commit()

    assert token.transferred_at == clock.now()
    assert registry.owner_of(db, v.id) == bob.id

    with pytest.raises(NotOwner):
        registry.transfer(db, village_id=v.id, from_id=alice.id, to_id=alice.id, now=clock.now())
    with pytest.raises(VillageNotFound):
        registry.transfer(db, village_id=99, from_id=bob.id, to_id=alice.id, now=clock.now())


def test_debit_is_all_or_nothing(db: Session, clock: ManualClock) -> None:
    ledger.open_account(db, "user:1", opening_balance=300, now=clock.now())
    db.commit()

    ledger.debit(db, "user:1", 300, now=clock.now())
    assert ledger.balance_of(db, "user:1") == 0

    with pytest.raises(InsufficientFunds):
        ledger.debit(db, "user:1", 1, now=clock.now())
    with pytest.raises(InsufficientFunds):
        ledger.debit(db, "nobody", 1, now=clock.now())


def test_credit_opens_missing_account(db: Session, clock: ManualClock) -> None:
    ledger.credit(db, "treasury", 250, now=clock.now())
    ledger.credit(db, "treasury", 250, now=clock.now())
    db.commit()
    assert ledger.balance_of(db, "treasury") == 500


@pytest.mark.parametrize("op", [ledger.debit, ledger.credit])
def test_negative_amounts_rejected(db: Session, clock: ManualClock, op) -> None:
    with pytest.raises(ValueError):
        op(db, "user:1", -5, now=clock.now())


def test_pay_treasury_moves_funds(db: Session, clock: ManualClock) -> None:
    ledger.open_account(db, "user:1", opening_balance=1_000, now=clock.now())
    ledger.pay_treasury(db, "user:1", 400, now=clock.now())
    db.commit()

    assert ledger.balance_of(db, "user:1") == 600
    assert ledger.balance_of(db, ledger.treasury_holder()) == 400


def test_mailbox_sink_writes_to_owner(db: Session, make_user, clock: ManualClock) -> None:
    alice = make_user("alice")
    MailboxSink().publish(db, VillageCreated(village_id=3, owner_id=alice.id, name="Ashford", at=clock.now()))

    msg = db.query(MailMessage).filter(MailMessage.user_id == alice.id).one()
    assert msg.kind == "village_created"
    assert "Ashford" in msg.subject
    assert json.loads(msg.payload_json)["village_id"] == 3
    assert msg.created_at == clock.now()
    assert msg.is_read == 0


def test_mailbox_sink_swallows_delivery_failure(
    db: Session, clock: ManualClock, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    from sqlalchemy.exc import OperationalError

    import hamlet.game.notifications as notifications

    def _broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(notifications, "deliver_to_mailbox", _broken)

    MailboxSink().publish(db, VillageCreated(village_id=1, owner_id=1, name="x", at=clock.now()))

    assert "could not deliver village_created" in caplog.text
    assert db.query(MailMessage).count() == 0
