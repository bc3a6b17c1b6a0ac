import asyncio
import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry import trace

from app.dashboard.application.ports.dashboard_repository_port import DashboardRepositoryPort
from app.dashboard.domain.entities.card_data import CardData
from app.dashboard.domain.entities.customer import Customer, CustomerSummary
from app.dashboard.domain.entities.invoice import InvoiceForm, InvoiceTableRow, LatestInvoice
from app.dashboard.domain.entities.revenue import Revenue
from app.dashboard.domain.errors import (
    CardDataFetchError,
    CustomersFetchError,
    DashboardDataError,
    FilteredCustomersFetchError,
    InvoiceFetchError,
    InvoicesFetchError,
    InvoicesPagesFetchError,
    LatestInvoicesFetchError,
    RevenueFetchError,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class FetchDashboardDataUseCase:
    ITEMS_PER_PAGE = 6
    LATEST_INVOICES_LIMIT = 5
    # LIMIT/OFFSET are bound as int8.
    MAX_OFFSET = 2**63 - 1

    def __init__(self, dashboard_repository: DashboardRepositoryPort) -> None:
        self._dashboard_repository = dashboard_repository

    @contextmanager
    def _fetching(self, error_type: type[DashboardDataError]) -> Iterator[None]:
        operation = error_type.operation
        with tracer.start_as_current_span(f"dashboard.{operation}"):
            try:
                yield
            except Exception as exc:
                logger.exception(
                    "dashboard_fetch_failed operation=%s error=%s",
                    operation,
                    str(exc),
                    extra={"operation": operation},
                )
                raise error_type() from exc

    async def fetch_revenue(self) -> list[Revenue]:
        with self._fetching(RevenueFetchError):
            revenue = await self._dashboard_repository.fetch_revenue()
        logger.info("revenue_fetched rows=%s", len(revenue), extra={"operation": "revenue"})
        return revenue

    async def fetch_latest_invoices(self) -> list[LatestInvoice]:
        with self._fetching(LatestInvoicesFetchError):
            raw_invoices = await self._dashboard_repository.fetch_latest_invoices(
                self.LATEST_INVOICES_LIMIT
            )
        logger.info(
            "latest_invoices_fetched rows=%s",
            len(raw_invoices),
            extra={"operation": "latest_invoices"},
        )
        return [LatestInvoice.from_raw(raw) for raw in raw_invoices]

    async def fetch_card_data(self) -> CardData:
        with self._fetching(CardDataFetchError):
            number_of_invoices, number_of_customers, status_totals = await asyncio.gather(
                self._dashboard_repository.count_invoices(),
                self._dashboard_repository.count_customers(),
                self._dashboard_repository.fetch_invoice_status_totals(),
            )
        logger.info(
            "card_data_fetched invoices=%s customers=%s",
            number_of_invoices,
            number_of_customers,
            extra={"operation": "card_data"},
        )
        return CardData.from_aggregates(
            number_of_invoices=number_of_invoices,
            number_of_customers=number_of_customers,
            status_totals=status_totals,
        )

    async def fetch_filtered_invoices(self, query: str, page: int) -> list[InvoiceTableRow]:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        offset = (page - 1) * self.ITEMS_PER_PAGE
        if offset > self.MAX_OFFSET:
            logger.info(
                "filtered_invoices_fetched page=%s rows=0",
                page,
                extra={"operation": "filtered_invoices", "page": page, "rows": 0},
            )
            return []
        with self._fetching(InvoicesFetchError):
            invoices = await self._dashboard_repository.fetch_filtered_invoices(
                query, limit=self.ITEMS_PER_PAGE, offset=offset
            )
        logger.info(
            "filtered_invoices_fetched page=%s rows=%s",
            page,
            len(invoices),
            extra={"operation": "filtered_invoices", "page": page, "rows": len(invoices)},
        )
        return invoices

    async def fetch_invoices_pages(self, query: str) -> int:
        with self._fetching(InvoicesPagesFetchError):
            count = await self._dashboard_repository.count_filtered_invoices(query)
        total_pages = math.ceil(count / self.ITEMS_PER_PAGE)
        logger.info(
            "invoices_pages_fetched matches=%s pages=%s",
            count,
            total_pages,
            extra={"operation": "invoices_pages"},
        )
        return total_pages

    async def fetch_invoice_by_id(self, invoice_id: str) -> InvoiceForm | None:
        with self._fetching(InvoiceFetchError):
            invoice = await self._dashboard_repository.fetch_invoice_by_id(invoice_id)
        if invoice is None:
            logger.info(
                "invoice_not_found invoice_id=%s",
                invoice_id,
                extra={"operation": "invoice_by_id", "invoice_id": invoice_id},
            )
            return None
        logger.info(
            "invoice_fetched invoice_id=%s",
            invoice_id,
            extra={"operation": "invoice_by_id", "invoice_id": invoice_id},
        )
        return InvoiceForm.from_invoice(invoice)

    async def fetch_customers(self) -> list[Customer]:
        with self._fetching(CustomersFetchError):
            customers = await self._dashboard_repository.fetch_customers()
        logger.info("customers_fetched rows=%s", len(customers), extra={"operation": "customers"})
        return customers

    async def fetch_filtered_customers(self, query: str) -> list[CustomerSummary]:
        with self._fetching(FilteredCustomersFetchError):
            customers = await self._dashboard_repository.fetch_filtered_customers(query)
        logger.info(
            "filtered_customers_fetched rows=%s",
            len(customers),
            extra={"operation": "filtered_customers"},
        )
        return [CustomerSummary.from_totals(customer) for customer in customers]
