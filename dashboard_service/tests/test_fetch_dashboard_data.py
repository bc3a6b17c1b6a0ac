import datetime
import math
import unittest
from decimal import Decimal

from app.dashboard.application.use_cases.fetch_dashboard_data import FetchDashboardDataUseCase
from app.dashboard.domain.entities.customer import Customer, CustomerInvoiceTotals
from app.dashboard.domain.entities.invoice import (
    Invoice,
    InvoiceStatusTotals,
    InvoiceTableRow,
    LatestInvoiceRaw,
)
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


class _InMemoryRepository:
    """Evaluates the dashboard reads over plain lists the way the SQL does."""

    def __init__(
        self,
        customers: list[Customer],
        invoices: list[Invoice],
        revenue: list[Revenue] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        self.customers = customers
        self.invoices = invoices
        self.revenue = revenue or []
        self.fail_on = fail_on or set()
        self.calls: list[tuple] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise ConnectionError(f"{name} exploded")

    def _customer(self, customer_id: str) -> Customer:
        return next(customer for customer in self.customers if customer.id == customer_id)

    def _joined_rows(self, query: str) -> list[InvoiceTableRow]:
        needle = query.lower()
        rows = []
        for invoice in self.invoices:
            customer = self._customer(invoice.customer_id)
            haystacks = (
                customer.name,
                customer.email,
                str(invoice.amount),
                invoice.date.isoformat() if invoice.date else "",
                invoice.status,
            )
            if any(needle in haystack.lower() for haystack in haystacks):
                rows.append(
                    InvoiceTableRow(
                        id=invoice.id,
                        amount=invoice.amount,
                        date=invoice.date,
                        status=invoice.status,
                        name=customer.name,
                        email=customer.email,
                        image_url=customer.image_url,
                    )
                )
        rows.sort(key=lambda row: row.id)
        rows.sort(key=lambda row: row.date, reverse=True)
        return rows

    async def fetch_revenue(self) -> list[Revenue]:
        self._record("fetch_revenue")
        return list(self.revenue)

    async def fetch_latest_invoices(self, limit: int) -> list[LatestInvoiceRaw]:
        self._record("fetch_latest_invoices", limit)
        return [
            LatestInvoiceRaw(
                id=row.id,
                amount=row.amount,
                name=row.name,
                email=row.email,
                image_url=row.image_url,
            )
            for row in self._joined_rows("")[:limit]
        ]

    async def count_invoices(self) -> int:
        self._record("count_invoices")
        return len(self.invoices)

    async def count_customers(self) -> int:
        self._record("count_customers")
        return len(self.customers)

    async def fetch_invoice_status_totals(self) -> InvoiceStatusTotals:
        self._record("fetch_invoice_status_totals")
        return InvoiceStatusTotals(
            paid=sum(i.amount for i in self.invoices if i.status == "paid"),
            pending=sum(i.amount for i in self.invoices if i.status == "pending"),
        )

    async def fetch_filtered_invoices(
        self, query: str, limit: int, offset: int
    ) -> list[InvoiceTableRow]:
        self._record("fetch_filtered_invoices", query, limit, offset)
        return self._joined_rows(query)[offset : offset + limit]

    async def count_filtered_invoices(self, query: str) -> int:
        self._record("count_filtered_invoices", query)
        return len(self._joined_rows(query))

    async def fetch_invoice_by_id(self, invoice_id: str) -> Invoice | None:
        self._record("fetch_invoice_by_id", invoice_id)
        return next((i for i in self.invoices if i.id == invoice_id), None)

    async def fetch_customers(self) -> list[Customer]:
        self._record("fetch_customers")
        return sorted(self.customers, key=lambda customer: customer.name)

    async def fetch_filtered_customers(self, query: str) -> list[CustomerInvoiceTotals]:
        self._record("fetch_filtered_customers", query)
        needle = query.lower()
        results = []
        for customer in sorted(self.customers, key=lambda c: c.name):
            if needle not in customer.name.lower() and needle not in customer.email.lower():
                continue
            owned = [i for i in self.invoices if i.customer_id == customer.id]
            results.append(
                CustomerInvoiceTotals(
                    id=customer.id,
                    name=customer.name,
                    email=customer.email,
                    image_url=customer.image_url,
                    total_invoices=len(owned),
                    total_pending=sum(i.amount for i in owned if i.status == "pending"),
                    total_paid=sum(i.amount for i in owned if i.status == "paid"),
                )
            )
        return results


_ALICE = Customer(id="1", name="Alice", email="a@x.com", image_url="/customers/alice.png")
_BOB = Customer(id="2", name="Bob", email="bob@example.com", image_url="/customers/bob.png")


def _single_invoice_repository(**kwargs) -> _InMemoryRepository:
    return _InMemoryRepository(
        customers=[_ALICE],
        invoices=[
            Invoice(
                id="i1",
                customer_id="1",
                amount=125000,
                status="paid",
                date=datetime.date(2024, 1, 1),
            )
        ],
        **kwargs,
    )


def _many_invoices_repository() -> _InMemoryRepository:
    invoices = [
        Invoice(
            id=f"inv-{index:02d}",
            customer_id="1" if index % 2 else "2",
            amount=1000 + index,
            status="paid" if index % 3 else "pending",
            date=datetime.date(2024, 1, 1) + datetime.timedelta(days=index // 2),
        )
        for index in range(20)
    ]
    return _InMemoryRepository(customers=[_ALICE, _BOB], invoices=invoices)


class TestFetchDashboardDataUseCase(unittest.IsolatedAsyncioTestCase):
    async def test_latest_invoices_formats_amount_and_joins_customer(self) -> None:
        repository = _single_invoice_repository()
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

        latest = await use_case.fetch_latest_invoices()

        self.assertEqual(len(latest), 1)
        self.assertEqual(latest[0].amount, "$1,250.00")
        self.assertEqual(latest[0].name, "Alice")
        self.assertEqual(latest[0].email, "a@x.com")
        self.assertIn(("fetch_latest_invoices", 5), repository.calls)

    async def test_card_data_combines_three_aggregates(self) -> None:
        use_case = FetchDashboardDataUseCase(dashboard_repository=_single_invoice_repository())

        cards = await use_case.fetch_card_data()

        self.assertEqual(cards.number_of_customers, 1)
        self.assertEqual(cards.number_of_invoices, 1)
        self.assertEqual(cards.total_paid_invoices, "$1,250.00")
        self.assertEqual(cards.total_pending_invoices, "$0.00")

    async def test_card_data_fails_when_any_aggregate_fails(self) -> None:
        for failing in ("count_invoices", "count_customers", "fetch_invoice_status_totals"):
            with self.subTest(failing=failing):
                repository = _single_invoice_repository(fail_on={failing})
                use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

                with self.assertLogs(
                    "app.dashboard.application.use_cases.fetch_dashboard_data", level="ERROR"
                ):
                    with self.assertRaises(CardDataFetchError) as raised:
                        await use_case.fetch_card_data()

                self.assertEqual(str(raised.exception), "Failed to fetch card data.")
                self.assertIsInstance(raised.exception.__cause__, ConnectionError)

    async def test_filtered_invoices_pages_are_contiguous_slices(self) -> None:
        repository = _many_invoices_repository()
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)
        full = repository._joined_rows("")

        pages = await use_case.fetch_invoices_pages("")
        collected: list[InvoiceTableRow] = []
        for page in range(1, pages + 1):
            rows = await use_case.fetch_filtered_invoices("", page)
            self.assertLessEqual(len(rows), FetchDashboardDataUseCase.ITEMS_PER_PAGE)
            self.assertEqual(rows, full[(page - 1) * 6 : page * 6])
            collected.extend(rows)

        self.assertEqual(collected, full)
        self.assertIn(("fetch_filtered_invoices", "", 6, 12), repository.calls)

    async def test_page_past_the_end_is_empty(self) -> None:
        use_case = FetchDashboardDataUseCase(dashboard_repository=_many_invoices_repository())

        self.assertEqual(await use_case.fetch_filtered_invoices("", 10), [])

    async def test_invoices_pages_is_ceiling_of_matches(self) -> None:
        repository = _many_invoices_repository()
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

        for query in ("", "alice", "BOB@", "pending", "2024-01-0", "no-such-thing"):
            with self.subTest(query=query):
                expected = math.ceil(len(repository._joined_rows(query)) / 6)
                self.assertEqual(await use_case.fetch_invoices_pages(query), expected)

        self.assertEqual(await use_case.fetch_invoices_pages(""), 4)
        self.assertEqual(await use_case.fetch_invoices_pages("no-such-thing"), 0)

    async def test_rejects_pages_below_one_without_querying(self) -> None:
        repository = _many_invoices_repository()
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

        with self.assertRaises(ValueError):
            await use_case.fetch_filtered_invoices("", 0)
        self.assertEqual(repository.calls, [])

    async def test_invoice_by_id_converts_amount_to_dollars(self) -> None:
        use_case = FetchDashboardDataUseCase(dashboard_repository=_single_invoice_repository())

        invoice = await use_case.fetch_invoice_by_id("i1")

        self.assertIsNotNone(invoice)
        self.assertEqual(invoice.amount, Decimal("1250"))
        self.assertEqual(invoice.status, "paid")

    async def test_unknown_invoice_id_returns_none(self) -> None:
        use_case = FetchDashboardDataUseCase(dashboard_repository=_single_invoice_repository())

        self.assertIsNone(await use_case.fetch_invoice_by_id("missing"))

    async def test_filtered_customers_aggregates_and_formats(self) -> None:
        use_case = FetchDashboardDataUseCase(dashboard_repository=_many_invoices_repository())

        customers = await use_case.fetch_filtered_customers("EXAMPLE.com")

        self.assertEqual([customer.name for customer in customers], ["Bob"])
        bob = customers[0]
        self.assertEqual(bob.total_invoices, 10)
        self.assertTrue(bob.total_paid.startswith("$"))
        self.assertTrue(bob.total_pending.startswith("$"))

    async def test_customers_are_ordered_by_name(self) -> None:
        repository = _InMemoryRepository(customers=[_BOB, _ALICE], invoices=[])
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

        customers = await use_case.fetch_customers()

        self.assertEqual([customer.name for customer in customers], ["Alice", "Bob"])

    async def test_revenue_is_returned_unchanged(self) -> None:
        revenue = [Revenue(month="Jan", revenue=2000), Revenue(month="Feb", revenue=1800)]
        repository = _InMemoryRepository(customers=[], invoices=[], revenue=revenue)
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

        self.assertEqual(await use_case.fetch_revenue(), revenue)

    async def test_repeated_reads_are_identical(self) -> None:
        use_case = FetchDashboardDataUseCase(dashboard_repository=_many_invoices_repository())

        self.assertEqual(
            await use_case.fetch_filtered_invoices("alice", 1),
            await use_case.fetch_filtered_invoices("alice", 1),
        )
        self.assertEqual(await use_case.fetch_card_data(), await use_case.fetch_card_data())

    async def test_every_operation_logs_completion(self) -> None:
        cases = [
            ("revenue", lambda uc: uc.fetch_revenue()),
            ("latest_invoices", lambda uc: uc.fetch_latest_invoices()),
            ("card_data", lambda uc: uc.fetch_card_data()),
            ("filtered_invoices", lambda uc: uc.fetch_filtered_invoices("", 1)),
            ("invoices_pages", lambda uc: uc.fetch_invoices_pages("")),
            ("invoice_by_id", lambda uc: uc.fetch_invoice_by_id("i1")),
            ("customers", lambda uc: uc.fetch_customers()),
            ("filtered_customers", lambda uc: uc.fetch_filtered_customers("")),
        ]
        for operation, call in cases:
            with self.subTest(operation=operation):
                use_case = FetchDashboardDataUseCase(
                    dashboard_repository=_single_invoice_repository()
                )

                with self.assertLogs(
                    "app.dashboard.application.use_cases.fetch_dashboard_data", level="INFO"
                ) as logs:
                    await call(use_case)

                self.assertEqual(logs.records[-1].levelname, "INFO")
                self.assertEqual(logs.records[-1].operation, operation)

    async def test_page_beyond_bindable_offset_is_empty_without_querying(self) -> None:
        repository = _many_invoices_repository()
        use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

        self.assertEqual(await use_case.fetch_filtered_invoices("", 10**19), [])
        self.assertEqual(repository.calls, [])

    async def test_driver_errors_become_operation_specific_errors(self) -> None:
        cases = [
            ("fetch_revenue", RevenueFetchError, lambda uc: uc.fetch_revenue()),
            ("fetch_customers", CustomersFetchError, lambda uc: uc.fetch_customers()),
            (
                "fetch_filtered_invoices",
                InvoicesFetchError,
                lambda uc: uc.fetch_filtered_invoices("a", 1),
            ),
            ("fetch_invoice_by_id", InvoiceFetchError, lambda uc: uc.fetch_invoice_by_id("i1")),
            (
                "fetch_latest_invoices",
                LatestInvoicesFetchError,
                lambda uc: uc.fetch_latest_invoices(),
            ),
            (
                "count_filtered_invoices",
                InvoicesPagesFetchError,
                lambda uc: uc.fetch_invoices_pages("a"),
            ),
            (
                "fetch_filtered_customers",
                FilteredCustomersFetchError,
                lambda uc: uc.fetch_filtered_customers("a"),
            ),
        ]
        for failing, error_type, call in cases:
            with self.subTest(failing=failing):
                repository = _single_invoice_repository(fail_on={failing})
                use_case = FetchDashboardDataUseCase(dashboard_repository=repository)

                with self.assertLogs(level="ERROR") as logs:
                    with self.assertRaises(error_type) as raised:
                        await call(use_case)

                self.assertIsInstance(raised.exception, DashboardDataError)
                self.assertEqual(str(raised.exception), error_type.default_message)
                self.assertIn(f"operation={error_type.operation}", logs.output[0])


if __name__ == "__main__":
    unittest.main()
