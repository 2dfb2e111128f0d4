"""Budget (tenant) table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Budget(SQLModel, table=True):
    """A zero-based budget; every other row is scoped to one."""

    __tablename__: ClassVar[str] = "budget"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    currency_code: str = Field(default="USD", max_length=3, description="ISO-4217 currency code")
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
