from fastapi import Depends, Header, HTTPException, Request, status

from storefront.services.cart import CartStore
from storefront.services.catalog import Catalog

SESSION_HEADER = "X-Session-ID"


def request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def get_catalog(request: Request) -> Catalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        detail = getattr(request.app.state, "catalog_error", None) or "Menu is not loaded yet"
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return catalog


def session_id(value: str = Header(alias=SESSION_HEADER, min_length=1)) -> str:
    """Visitor session the cart belongs to. Requests without one are rejected."""
    return value


def get_cart(request: Request, session: str = Depends(session_id)) -> CartStore:
    return request.app.state.carts.get(session)
