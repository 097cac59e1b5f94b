from pydantic import BaseModel
from typing import Any, Optional, List


class SearchLinksResponse(BaseModel):
    product: Optional[str] = None
    searchQuery: Optional[str] = None
    amazonAppUrl: str
    amazonWebUrl: str


class ProductLink(BaseModel):
    title: str
    url: str


class ProductsResponse(BaseModel):
    # Items are relayed exactly as the model returned them (normally ProductLink-shaped)
    products: List[Any]


class ErrorResponse(BaseModel):
    error: str
    raw: Optional[str] = None
