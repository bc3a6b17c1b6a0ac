import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from app.shared.domain.currency import cents_to_dollars, format_currency


def _parse_date(value: Any) -> datetime.date | None:
    if value is None or isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return datetime.date.fromisoformat(value[:10])
    return None


def _to_cents(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


@dataclass(frozen=True, slots=True)
class Invoice:
    id: str
    customer_id: str
    amount: int
    status: str
    date: datetime.date | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Invoice":
        return cls(
            id=str(record["id"]),
            customer_id=str(record["customer_id"]),
            amount=_to_cents(record["amount"]),
            status=record["status"],
            date=_parse_date(record.get("date")),
        )


@dataclass(frozen=True, slots=True)
class InvoiceForm:
    """An invoice prepared for editing: ``amount`` is in dollars, not cents."""

    id: str
    customer_id: str
    amount: Decimal
    status: str

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceForm":
        return cls(
            id=invoice.id,
            customer_id=invoice.customer_id,
            amount=cents_to_dollars(invoice.amount),
            status=invoice.status,
        )


@dataclass(frozen=True, slots=True)
class InvoiceTableRow:
    id: str
    amount: int
    date: datetime.date | None
    status: str
    name: str
    email: str
    image_url: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "InvoiceTableRow":
        return cls(
            id=str(record["id"]),
            amount=_to_cents(record["amount"]),
            date=_parse_date(record["date"]),
            status=record["status"],
            name=record["name"],
            email=record["email"],
            image_url=record["image_url"],
        )


@dataclass(frozen=True, slots=True)
class LatestInvoiceRaw:
    id: str
    amount: int
    name: str
    email: str
    image_url: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LatestInvoiceRaw":
        return cls(
            id=str(record["id"]),
            amount=_to_cents(record["amount"]),
            name=record["name"],
            email=record["email"],
            image_url=record["image_url"],
        )


@dataclass(frozen=True, slots=True)
class LatestInvoice:
    id: str
    amount: str
    name: str
    email: str
    image_url: str

    @classmethod
    def from_raw(cls, raw: LatestInvoiceRaw) -> "LatestInvoice":
        return cls(
            id=raw.id,
            amount=format_currency(raw.amount),
            name=raw.name,
            email=raw.email,
            image_url=raw.image_url,
        )


@dataclass(frozen=True, slots=True)
class InvoiceStatusTotals:
    paid: int = 0
    pending: int = 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any] | None) -> "InvoiceStatusTotals":
        # SUM() over an empty table yields NULL.
        if record is None:
            return cls()
        return cls(paid=_to_cents(record["paid"]), pending=_to_cents(record["pending"]))
