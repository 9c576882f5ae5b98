# hamlet/game/ledger.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from hamlet.config import TREASURY_HOLDER
from hamlet.game.errors import InsufficientFunds
from hamlet.models.account import Account

logger = logging.getLogger(__name__)


def holder_for_user(user_id: int) -> str:
    return f"user:{int(user_id)}"


def treasury_holder() -> str:
    return TREASURY_HOLDER


def get_account(db: Session, holder: str) -> Account | None:
    return db.query(Account).filter(Account.holder == holder).first()


def open_account(db: Session, holder: str, *, opening_balance: int = 0, now: datetime) -> Account:
    """Get-or-create. Does NOT commit."""
    acct = get_account(db, holder)
    if acct is None:
        acct = Account(holder=holder, balance=max(0, int(opening_balance)), updated_at=now)
        db.add(acct)
        db.flush()
    return acct


def balance_of(db: Session, holder: str) -> int:
    # column query: always reads the row, never a stale identity-map object
    balance = db.query(Account.balance).filter(Account.holder == holder).scalar()
    return int(balance) if balance is not None else 0


def debit(db: Session, holder: str, amount: int, *, now: datetime) -> None:
    """
    Take `amount` from `holder` in a single conditional UPDATE.
    The balance check and the write are the same statement, so two
    concurrent debits can never both pass against the same funds.
    Does NOT commit.
    """
    amount = int(amount)
    if amount < 0:
        raise ValueError("debit amount must not be negative")
    if amount == 0:
        return

    result = db.execute(
        update(Account)
        .where(Account.holder == holder, Account.balance >= amount)
        .values(balance=Account.balance - amount, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientFunds(
            holder=holder,
            need=amount,
            have=balance_of(db, holder),
        )


def credit(db: Session, holder: str, amount: int, *, now: datetime) -> None:
    """Add `amount` to `holder`, opening the account if needed. Does NOT commit."""
    amount = int(amount)
    if amount < 0:
        raise ValueError("credit amount must not be negative")

    result = db.execute(
        update(Account)
        .where(Account.holder == holder)
        .values(balance=Account.balance + amount, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        open_account(db, holder, opening_balance=amount, now=now)


def pay_treasury(db: Session, payer: str, amount: int, *, now: datetime) -> None:
    # debit first: if it raises nothing has been credited
    debit(db, payer, amount, now=now)
    credit(db, treasury_holder(), amount, now=now)
    logger.debug("%s paid %s to treasury", payer, amount)
