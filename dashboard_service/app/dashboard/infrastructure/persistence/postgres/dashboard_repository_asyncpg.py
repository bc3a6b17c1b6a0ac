from typing import Any

import asyncpg  # type: ignore[import-untyped]

from app.dashboard.domain.entities.customer import Customer, CustomerInvoiceTotals
from app.dashboard.domain.entities.invoice import (
    Invoice,
    InvoiceStatusTotals,
    InvoiceTableRow,
    LatestInvoiceRaw,
)
from app.dashboard.domain.entities.revenue import Revenue

_INVOICE_SEARCH_PREDICATE = (
    "customers.name ILIKE $1 OR "
    "customers.email ILIKE $1 OR "
    "invoices.amount::text ILIKE $1 OR "
    "invoices.date::text ILIKE $1 OR "
    "invoices.status ILIKE $1"
)


def contains_pattern(query: str | None) -> str:
    """Build an ILIKE pattern matching ``query`` literally anywhere in a column."""
    escaped = (
        (query or "")
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


class DashboardRepositoryAsyncpg:
    def __init__(self, db_pool: asyncpg.Pool) -> None:
        self._db_pool = db_pool

    async def _fetch(self, query: str, *params: Any) -> list[Any]:
        async with self._db_pool.acquire() as connection:
            return await connection.fetch(query, *params)

    async def _fetchrow(self, query: str, *params: Any) -> Any:
        async with self._db_pool.acquire() as connection:
            return await connection.fetchrow(query, *params)

    async def _fetchval(self, query: str, *params: Any) -> Any:
        async with self._db_pool.acquire() as connection:
            return await connection.fetchval(query, *params)

    async def fetch_revenue(self) -> list[Revenue]:
        rows = await self._fetch("SELECT month, revenue FROM revenue")
        return [Revenue.from_record(row) for row in rows]

    async def fetch_latest_invoices(self, limit: int) -> list[LatestInvoiceRaw]:
        rows = await self._fetch(
            "SELECT invoices.amount, customers.name, customers.image_url, "
            "customers.email, invoices.id "
            "FROM invoices "
            "JOIN customers ON invoices.customer_id = customers.id "
            "ORDER BY invoices.date DESC "
            "LIMIT $1",
            limit,
        )
        return [LatestInvoiceRaw.from_record(row) for row in rows]

    async def count_invoices(self) -> int:
        return int(await self._fetchval("SELECT COUNT(*) FROM invoices") or 0)

    async def count_customers(self) -> int:
        return int(await self._fetchval("SELECT COUNT(*) FROM customers") or 0)

    async def fetch_invoice_status_totals(self) -> InvoiceStatusTotals:
        row = await self._fetchrow(
            "SELECT "
            "SUM(CASE WHEN status = 'paid' THEN amount ELSE 0 END) AS paid, "
            "SUM(CASE WHEN status = 'pending' THEN amount ELSE 0 END) AS pending "
            "FROM invoices"
        )
        return InvoiceStatusTotals.from_record(row)

    async def fetch_filtered_invoices(
        self, query: str, limit: int, offset: int
    ) -> list[InvoiceTableRow]:
        rows = await self._fetch(
            "SELECT invoices.id, invoices.amount, invoices.date, invoices.status, "
            "customers.name, customers.email, customers.image_url "
            "FROM invoices "
            "JOIN customers ON invoices.customer_id = customers.id "
            f"WHERE {_INVOICE_SEARCH_PREDICATE} "
            "ORDER BY invoices.date DESC, invoices.id "
            "LIMIT $2 OFFSET $3",
            contains_pattern(query),
            limit,
            offset,
        )
        return [InvoiceTableRow.from_record(row) for row in rows]

    async def count_filtered_invoices(self, query: str) -> int:
        count = await self._fetchval(
            "SELECT COUNT(*) "
            "FROM invoices "
            "JOIN customers ON invoices.customer_id = customers.id "
            f"WHERE {_INVOICE_SEARCH_PREDICATE}",
            contains_pattern(query),
        )
        return int(count or 0)

    async def fetch_invoice_by_id(self, invoice_id: str) -> Invoice | None:
        row = await self._fetchrow(
            "SELECT invoices.id, invoices.customer_id, invoices.amount, invoices.status "
            "FROM invoices "
            "WHERE invoices.id = $1",
            invoice_id,
        )
        if row is None:
            return None
        return Invoice.from_record(row)

    async def fetch_customers(self) -> list[Customer]:
        rows = await self._fetch(
            "SELECT id, name, email, image_url FROM customers ORDER BY name ASC"
        )
        return [Customer.from_record(row) for row in rows]

    async def fetch_filtered_customers(self, query: str) -> list[CustomerInvoiceTotals]:
        rows = await self._fetch(
            "SELECT customers.id, customers.name, customers.email, customers.image_url, "
            "COUNT(invoices.id) AS total_invoices, "
            "SUM(CASE WHEN invoices.status = 'pending' THEN invoices.amount ELSE 0 END) "
            "AS total_pending, "
            "SUM(CASE WHEN invoices.status = 'paid' THEN invoices.amount ELSE 0 END) "
            "AS total_paid "
            "FROM customers "
            "LEFT JOIN invoices ON customers.id = invoices.customer_id "
            "WHERE customers.name ILIKE $1 OR customers.email ILIKE $1 "
            "GROUP BY customers.id, customers.name, customers.email, customers.image_url "
            "ORDER BY customers.name ASC",
            contains_pattern(query),
        )
        return [CustomerInvoiceTotals.from_record(row) for row in rows]
