"""Account registry table."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel

CHECKING = "checking"
SAVINGS = "savings"
CASH = "cash"
CREDIT = "credit"
ACCOUNT_TYPES = frozenset({CHECKING, SAVINGS, CASH, CREDIT})


class Account(SQLModel, table=True):
    """A money account; balances are cached Milliunit sums of its transactions."""

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(foreign_key="budget.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    type: str = Field(default=CHECKING, nullable=False, max_length=16)
    balance: int = Field(default=0, sa_type=BigInteger, nullable=False)
    cleared_balance: int = Field(default=0, sa_type=BigInteger, nullable=False)
    uncleared_balance: int = Field(default=0, sa_type=BigInteger, nullable=False)
    closed: bool = Field(default=False, nullable=False)

    @property
    def is_credit(self) -> bool:
        return self.type == CREDIT
