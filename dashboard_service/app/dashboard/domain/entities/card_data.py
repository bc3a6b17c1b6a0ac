from dataclasses import dataclass

from app.dashboard.domain.entities.invoice import InvoiceStatusTotals
from app.shared.domain.currency import format_currency


@dataclass(frozen=True, slots=True)
class CardData:
    number_of_customers: int
    number_of_invoices: int
    total_paid_invoices: str
    total_pending_invoices: str

    @classmethod
    def from_aggregates(
        cls,
        number_of_invoices: int | None,
        number_of_customers: int | None,
        status_totals: InvoiceStatusTotals,
    ) -> "CardData":
        return cls(
            number_of_customers=int(number_of_customers or 0),
            number_of_invoices=int(number_of_invoices or 0),
            total_paid_invoices=format_currency(status_totals.paid),
            total_pending_invoices=format_currency(status_totals.pending),
        )
