from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from document_ledger.domain.value_objects import EntryType, to_decimal
from document_ledger.exceptions import InvalidArgumentError


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Transaction:
    transaction_date: date
    description: str = ""
    document_id: UUID | None = None
    document_number: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class LedgerEntry:
    transaction_id: UUID
    account_id: str
    entry_type: EntryType
    amount: Decimal
    account_name: str = ""
    person_id: str | None = None
    cost_centre_id: str | None = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.amount < 0:
            raise InvalidArgumentError(
                "amount", f"ledger entry amounts cannot be negative, got {self.amount}"
            )

    @property
    def is_debit(self) -> bool:
        return self.entry_type == EntryType.DEBIT

    @property
    def is_credit(self) -> bool:
        return self.entry_type == EntryType.CREDIT

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_debit else -self.amount


def total_debits(entries: list[LedgerEntry]) -> Decimal:
    return sum((e.amount for e in entries if e.is_debit), Decimal("0"))


def total_credits(entries: list[LedgerEntry]) -> Decimal:
    return sum((e.amount for e in entries if e.is_credit), Decimal("0"))
