"""
Dashboard API HTTP Client.

Thin httpx wrapper over the sales endpoints, used by dashboard front ends
and scripts. Filter state is kept as Python lists and rendered into the
comma-separated query parameters the API expects.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from app.schemas.sales import FilterOptionsResponse, SaleListResponse, SummaryResponse

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error: Unable to connect to server"


class DashboardApiError(Exception):
    """Request failed; `message` is the server's error text when it sent one."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class DashboardFilters:
    """Search, filter, sort and paging state of a dashboard view."""
    search: str = ""
    regions: List[str] = field(default_factory=list)
    genders: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    payment_methods: List[str] = field(default_factory=list)
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    sort_by: str = "date"
    sort_order: str = "DESC"
    page: int = 1
    page_size: int = 10

    def to_query_params(self, include_paging: bool = True) -> Dict[str, Any]:
        """Query parameters for this state; empty selections are left out."""
        params: Dict[str, Any] = {}
        if self.search:
            params["search"] = self.search

        for name, values in (
            ("regions", self.regions),
            ("genders", self.genders),
            ("categories", self.categories),
            ("tags", self.tags),
            ("paymentMethods", self.payment_methods),
        ):
            if values:
                params[name] = ",".join(values)

        for name, value in (
            ("ageMin", self.age_min),
            ("ageMax", self.age_max),
            ("dateFrom", self.date_from),
            ("dateTo", self.date_to),
        ):
            if value is not None and value != "":
                params[name] = str(value)

        if include_paging:
            params.update({
                "sortBy": self.sort_by,
                "sortOrder": self.sort_order,
                "page": self.page,
                "pageSize": self.page_size,
            })
        return params


class DashboardClient:
    """
    Client for the sales API.

    Pass `http_client` to reuse an existing httpx.Client (its base_url must
    point at the API root, e.g. http://localhost:5000/api).
    """
    DEFAULT_BASE_URL = "http://localhost:5000/api"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DashboardClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, path: str, params: Optional[Dict[str, Any]], failure_message: str) -> Any:
        try:
            response = self._client.get(path, params=params)
        except httpx.RequestError as e:
            logger.warning(f"[DASHBOARD API] {path} unreachable: {e}")
            raise DashboardApiError(NETWORK_ERROR) from e

        if response.is_error:
            message = failure_message
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = body["error"]
            logger.warning(f"[DASHBOARD API] {path} -> {response.status_code}: {message}")
            raise DashboardApiError(message, status_code=response.status_code)

        return response.json()

    def get_sales(self, filters: Optional[DashboardFilters] = None) -> SaleListResponse:
        """One page of sales for the given state."""
        filters = filters or DashboardFilters()
        data = self._get("/sales", filters.to_query_params(), "Failed to fetch sales data")
        return SaleListResponse.model_validate(data)

    def get_filter_options(self) -> FilterOptionsResponse:
        """All available filter values."""
        data = self._get("/sales/filters", None, "Failed to fetch filter options")
        return FilterOptionsResponse.model_validate(data)

    def get_summary(self, filters: Optional[DashboardFilters] = None) -> SummaryResponse:
        """Totals for the given state (sort and paging are ignored)."""
        filters = filters or DashboardFilters()
        data = self._get(
            "/sales/summary",
            filters.to_query_params(include_paging=False),
            "Failed to fetch summary statistics",
        )
        return SummaryResponse.model_validate(data)
