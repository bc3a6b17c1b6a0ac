from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from app.dashboard.application.use_cases.fetch_dashboard_data import FetchDashboardDataUseCase
from app.dashboard.domain.entities.card_data import CardData
from app.dashboard.domain.entities.customer import Customer, CustomerSummary
from app.dashboard.domain.entities.invoice import InvoiceForm, InvoiceTableRow, LatestInvoice
from app.dashboard.domain.entities.revenue import Revenue
from app.dashboard.domain.errors import DashboardDataError

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _use_case(request: Request) -> FetchDashboardDataUseCase:
    return request.app.state.dashboard_use_case


async def dashboard_data_error_handler(
    request: Request, exc: DashboardDataError
) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@router.get("/revenue")
async def revenue(request: Request) -> list[Revenue]:
    return await _use_case(request).fetch_revenue()


@router.get("/latest-invoices")
async def latest_invoices(request: Request) -> list[LatestInvoice]:
    return await _use_case(request).fetch_latest_invoices()


@router.get("/cards")
async def cards(request: Request) -> CardData:
    return await _use_case(request).fetch_card_data()


@router.get("/invoices")
async def invoices(
    request: Request,
    query: str = "",
    page: int = Query(default=1, ge=1, le=2**31 - 1),
) -> list[InvoiceTableRow]:
    return await _use_case(request).fetch_filtered_invoices(query, page)


@router.get("/invoices/pages")
async def invoices_pages(request: Request, query: str = "") -> dict[str, int]:
    return {"total_pages": await _use_case(request).fetch_invoices_pages(query)}


@router.get("/invoices/{invoice_id}")
async def invoice(request: Request, invoice_id: str) -> InvoiceForm:
    found = await _use_case(request).fetch_invoice_by_id(invoice_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return found


@router.get("/customers")
async def customers(request: Request) -> list[Customer]:
    return await _use_case(request).fetch_customers()


@router.get("/customers/filtered")
async def filtered_customers(request: Request, query: str = "") -> list[CustomerSummary]:
    return await _use_case(request).fetch_filtered_customers(query)
