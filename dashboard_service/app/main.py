import datetime
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.asyncpg import AsyncPGInstrumentor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_fastapi_instrumentator import Instrumentator
import strawberry
from strawberry.fastapi import GraphQLRouter

from app.core.config import settings
from app.dashboard.application.use_cases.fetch_dashboard_data import FetchDashboardDataUseCase
from app.dashboard.domain.errors import DashboardDataError
from app.dashboard.infrastructure.api.rest.router import (
    dashboard_data_error_handler,
    router as dashboard_router,
)
from app.dashboard.infrastructure.persistence.postgres.dashboard_repository_asyncpg import (
    DashboardRepositoryAsyncpg,
)
from app.shared.infrastructure.logging.structured_logger import configure_json_logging
from app.shared.infrastructure.persistence.postgres.pool import close_db_pool, create_db_pool


@strawberry.type
class RevenueType:
    month: str
    revenue: int


@strawberry.type
class LatestInvoiceType:
    id: str
    amount: str
    name: str
    email: str
    image_url: str


@strawberry.type
class CardDataType:
    number_of_customers: int
    number_of_invoices: int
    total_paid_invoices: str
    total_pending_invoices: str


@strawberry.type
class InvoiceRowType:
    id: str
    amount: int
    date: datetime.date | None
    status: str
    name: str
    email: str
    image_url: str


@strawberry.type
class InvoiceFormType:
    id: str
    customer_id: str
    amount: Decimal
    status: str


@strawberry.type
class CustomerType:
    id: str
    name: str
    email: str
    image_url: str


@strawberry.type
class CustomerSummaryType:
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str


def _use_case(info: strawberry.Info) -> FetchDashboardDataUseCase:
    return info.context["request"].app.state.dashboard_use_case


@strawberry.type
class Query:
    @strawberry.field
    async def revenue(self, info: strawberry.Info) -> list[RevenueType]:
        rows = await _use_case(info).fetch_revenue()
        return [RevenueType(month=row.month, revenue=row.revenue) for row in rows]

    @strawberry.field
    async def latest_invoices(self, info: strawberry.Info) -> list[LatestInvoiceType]:
        invoices = await _use_case(info).fetch_latest_invoices()
        return [
            LatestInvoiceType(
                id=invoice.id,
                amount=invoice.amount,
                name=invoice.name,
                email=invoice.email,
                image_url=invoice.image_url,
            )
            for invoice in invoices
        ]

    @strawberry.field
    async def card_data(self, info: strawberry.Info) -> CardDataType:
        cards = await _use_case(info).fetch_card_data()
        return CardDataType(
            number_of_customers=cards.number_of_customers,
            number_of_invoices=cards.number_of_invoices,
            total_paid_invoices=cards.total_paid_invoices,
            total_pending_invoices=cards.total_pending_invoices,
        )

    @strawberry.field
    async def invoices(
        self,
        info: strawberry.Info,
        query: str = "",
        page: int = 1,
    ) -> list[InvoiceRowType]:
        rows = await _use_case(info).fetch_filtered_invoices(query, page)
        return [
            InvoiceRowType(
                id=row.id,
                amount=row.amount,
                date=row.date,
                status=row.status,
                name=row.name,
                email=row.email,
                image_url=row.image_url,
            )
            for row in rows
        ]

    @strawberry.field
    async def invoices_pages(self, info: strawberry.Info, query: str = "") -> int:
        return await _use_case(info).fetch_invoices_pages(query)

    @strawberry.field
    async def invoice(self, info: strawberry.Info, id: str) -> InvoiceFormType | None:
        found = await _use_case(info).fetch_invoice_by_id(id)
        if found is None:
            return None
        return InvoiceFormType(
            id=found.id,
            customer_id=found.customer_id,
            amount=found.amount,
            status=found.status,
        )

    @strawberry.field
    async def customers(self, info: strawberry.Info) -> list[CustomerType]:
        customers = await _use_case(info).fetch_customers()
        return [
            CustomerType(
                id=customer.id,
                name=customer.name,
                email=customer.email,
                image_url=customer.image_url,
            )
            for customer in customers
        ]

    @strawberry.field
    async def filtered_customers(
        self, info: strawberry.Info, query: str = ""
    ) -> list[CustomerSummaryType]:
        customers = await _use_case(info).fetch_filtered_customers(query)
        return [
            CustomerSummaryType(
                id=customer.id,
                name=customer.name,
                email=customer.email,
                image_url=customer.image_url,
                total_invoices=customer.total_invoices,
                total_pending=customer.total_pending,
                total_paid=customer.total_paid,
            )
            for customer in customers
        ]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_json_logging(settings.log_level)
    tracer_provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: settings.otel_service_name})
    )
    if settings.otel_enabled:
        tracer_provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(
                    endpoint=settings.otel_exporter_endpoint,
                    insecure=True,
                )
            )
        )
    trace.set_tracer_provider(tracer_provider)
    asyncpg_instrumentor = AsyncPGInstrumentor()
    asyncpg_instrumentor.instrument()
    app.state.db_pool = await create_db_pool(settings)
    dashboard_repository = DashboardRepositoryAsyncpg(db_pool=app.state.db_pool)
    app.state.dashboard_use_case = FetchDashboardDataUseCase(
        dashboard_repository=dashboard_repository
    )

    try:
        yield
    finally:
        await close_db_pool(app.state.db_pool)
        asyncpg_instrumentor.uninstrument()
        tracer_provider.shutdown()


app = FastAPI(title="Invoice Dashboard Service", lifespan=lifespan)
FastAPIInstrumentor.instrument_app(app)
Instrumentator().instrument(app).expose(app)
schema = strawberry.Schema(query=Query)
app.include_router(GraphQLRouter(schema), prefix="/graphql")
app.include_router(dashboard_router)
app.add_exception_handler(DashboardDataError, dashboard_data_error_handler)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
