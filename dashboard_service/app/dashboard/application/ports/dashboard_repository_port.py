from typing import Protocol

from app.dashboard.domain.entities.customer import Customer, CustomerInvoiceTotals
from app.dashboard.domain.entities.invoice import (
    Invoice,
    InvoiceStatusTotals,
    InvoiceTableRow,
    LatestInvoiceRaw,
)
from app.dashboard.domain.entities.revenue import Revenue


class DashboardRepositoryPort(Protocol):
    async def fetch_revenue(self) -> list[Revenue]: ...

    async def fetch_latest_invoices(self, limit: int) -> list[LatestInvoiceRaw]: ...

    async def count_invoices(self) -> int: ...

    async def count_customers(self) -> int: ...

    async def fetch_invoice_status_totals(self) -> InvoiceStatusTotals: ...

    async def fetch_filtered_invoices(
        self, query: str, limit: int, offset: int
    ) -> list[InvoiceTableRow]: ...

    async def count_filtered_invoices(self, query: str) -> int: ...

    async def fetch_invoice_by_id(self, invoice_id: str) -> Invoice | None: ...

    async def fetch_customers(self) -> list[Customer]: ...

    async def fetch_filtered_customers(self, query: str) -> list[CustomerInvoiceTotals]: ...
