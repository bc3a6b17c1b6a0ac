class DashboardDataError(RuntimeError):
    """Raised when a dashboard read fails; the driver error is only logged and chained."""

    operation: str = "unknown"
    default_message: str = "Failed to fetch dashboard data."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class RevenueFetchError(DashboardDataError):
    operation = "revenue"
    default_message = "Failed to fetch revenue data."


class LatestInvoicesFetchError(DashboardDataError):
    operation = "latest_invoices"
    default_message = "Failed to fetch the latest invoices."


class CardDataFetchError(DashboardDataError):
    operation = "card_data"
    default_message = "Failed to fetch card data."


class InvoicesFetchError(DashboardDataError):
    operation = "filtered_invoices"
    default_message = "Failed to fetch invoices."


class InvoicesPagesFetchError(DashboardDataError):
    operation = "invoices_pages"
    default_message = "Failed to fetch total number of invoices."


class InvoiceFetchError(DashboardDataError):
    operation = "invoice_by_id"
    default_message = "Failed to fetch invoice."


class CustomersFetchError(DashboardDataError):
    operation = "customers"
    default_message = "Failed to fetch all customers."


class FilteredCustomersFetchError(DashboardDataError):
    operation = "filtered_customers"
    default_message = "Failed to fetch customer table."
