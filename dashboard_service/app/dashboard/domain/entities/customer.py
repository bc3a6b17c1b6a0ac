from dataclasses import dataclass
from typing import Any, Mapping

from app.shared.domain.currency import format_currency


@dataclass(frozen=True, slots=True)
class Customer:
    id: str
    name: str
    email: str
    image_url: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Customer":
        return cls(
            id=str(record["id"]),
            name=record["name"],
            email=record["email"],
            image_url=record["image_url"],
        )


@dataclass(frozen=True, slots=True)
class CustomerInvoiceTotals:
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: int
    total_paid: int

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CustomerInvoiceTotals":
        return cls(
            id=str(record["id"]),
            name=record["name"],
            email=record["email"],
            image_url=record["image_url"],
            total_invoices=int(record["total_invoices"] or 0),
            total_pending=int(record["total_pending"] or 0),
            total_paid=int(record["total_paid"] or 0),
        )


@dataclass(frozen=True, slots=True)
class CustomerSummary:
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str

    @classmethod
    def from_totals(cls, totals: CustomerInvoiceTotals) -> "CustomerSummary":
        return cls(
            id=totals.id,
            name=totals.name,
            email=totals.email,
            image_url=totals.image_url,
            total_invoices=totals.total_invoices,
            total_pending=format_currency(totals.total_pending),
            total_paid=format_currency(totals.total_paid),
        )
