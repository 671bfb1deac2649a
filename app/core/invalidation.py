import logging

from fastapi import Response

logger = logging.getLogger(__name__)

INVALIDATION_HEADER = "X-Invalidated-Views"


class Views:
    """Rendered view paths that mutations can make stale."""

    FINANCE = "/dashboard/finance"
    TRANSACTIONS = "/dashboard/finance/transactions"
    PAYABLES = "/dashboard/finance/payables"
    RECEIVABLES = "/dashboard/finance/receivables"
    CATEGORIES = "/dashboard/finance/categories"
    FINANCIAL_ACCOUNTS = "/dashboard/finance/accounts"
    SALES = "/dashboard/sales"
    CUSTOMERS = "/dashboard/registry/customers"
    SUPPLIERS = "/dashboard/registry/suppliers"
    PRODUCTS = "/dashboard/registry/products"
    SERVICES = "/dashboard/services"
    QUOTES = "/dashboard/services/quotes"
    STOCK_ENTRIES = "/dashboard/inventory/entries"
    LOGISTICS = "/dashboard/logistics"
    SETTINGS = "/dashboard/settings"
    INTEGRATIONS = "/dashboard/integrations/nuvemshop"
    OPERATOR = "/oraculo"

    @staticmethod
    def detail(listing: str, entity_id: int) -> str:
        return f"{listing}/{entity_id}"


class ViewInvalidator:
    """
    Collects the view paths made stale by a successful mutation.

    Services call invalidate() after commit; when bound to a response the
    paths are reported to the client in the X-Invalidated-Views header so
    rendered views can be refetched on next read.
    """

    def __init__(self, response: Response | None = None):
        self.response = response
        self.paths: list[str] = []

    def invalidate(self, *paths: str) -> None:
        for path in paths:
            if path not in self.paths:
                self.paths.append(path)

        logger.debug("Views invalidated", extra={"paths": list(paths)})

        if self.response is not None and self.paths:
            self.response.headers[INVALIDATION_HEADER] = ",".join(self.paths)
