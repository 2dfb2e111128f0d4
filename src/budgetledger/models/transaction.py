"""Transaction log tables."""

from __future__ import annotations

import datetime as dt
from typing import ClassVar, Optional

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel

UNCLEARED = "Uncleared"
CLEARED = "Cleared"
RECONCILED = "Reconciled"
CLEARED_STATES = (UNCLEARED, CLEARED, RECONCILED)


class Transaction(SQLModel, table=True):
    """A single money movement on an account, in Milliunits."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    date: dt.date = Field(nullable=False, index=True)
    payee: str = Field(default="", max_length=255)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    memo: str = Field(default="", max_length=255)
    outflow: int = Field(default=0, sa_type=BigInteger, nullable=False)
    inflow: int = Field(default=0, sa_type=BigInteger, nullable=False)
    cleared: str = Field(default=UNCLEARED, nullable=False, max_length=16)

    @property
    def net(self) -> int:
        return self.inflow - self.outflow


class Transfer(SQLModel, table=True):
    """Links the outflow leg and the inflow leg of an account-to-account move."""

    __tablename__: ClassVar[str] = "transfer"

    id: Optional[int] = Field(default=None, primary_key=True)
    from_transaction_id: int = Field(foreign_key="transaction.id", nullable=False, unique=True)
    to_transaction_id: int = Field(foreign_key="transaction.id", nullable=False, unique=True)
