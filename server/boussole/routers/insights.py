"""Insights endpoints - AI recommendations per application page."""

from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends

from ..config import AIConfig
from ..dependencies import get_ai_config, get_cache, get_generative_client
from ..models import Client, Expense, Product, SalesPoint, Supplier
from ..services.cache import InsightCache
from ..services.gemini import GenerativeClient
from ..services.insights import (
    Fallback,
    InsightOutcome,
    client_insights_outcome,
    dashboard_insights_outcome,
    expense_insights_outcome,
    inventory_insights_outcome,
    supplier_insights_outcome,
)

router = APIRouter(tags=["insights"])


class DashboardRequest(BaseModel):
    sales_chart: list[SalesPoint] = Field(default_factory=list, alias="salesChart")
    products: list[Product] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class InventoryRequest(BaseModel):
    products: list[Product] = Field(default_factory=list)


class ClientsRequest(BaseModel):
    clients: list[Client] = Field(default_factory=list)


class SuppliersRequest(BaseModel):
    suppliers: list[Supplier] = Field(default_factory=list)


class ExpensesRequest(BaseModel):
    expenses: list[Expense] = Field(default_factory=list)
    total_sales: float = Field(default=0, alias="totalSales")

    model_config = {"populate_by_name": True}


def describe(outcome: InsightOutcome, field: str) -> dict:
    """Render an outcome as ``{field: value, source[, reason]}``."""
    value = outcome.value
    if isinstance(value, tuple):
        value = list(value)

    if isinstance(outcome, Fallback):
        return {field: value, "source": "fallback", "reason": outcome.reason}
    return {field: value, "source": outcome.source}


@router.post("/insights/dashboard")
async def dashboard_insights(
    request: DashboardRequest,
    config: AIConfig = Depends(get_ai_config),
    cache: InsightCache = Depends(get_cache),
    client: GenerativeClient = Depends(get_generative_client),
):
    """Get three cash-flow decisions for the dashboard."""
    outcome = await dashboard_insights_outcome(
        config, request.sales_chart, request.products, cache=cache, client=client
    )
    return describe(outcome, "tips")


@router.post("/insights/inventory")
async def inventory_insights(
    request: InventoryRequest,
    config: AIConfig = Depends(get_ai_config),
    cache: InsightCache = Depends(get_cache),
    client: GenerativeClient = Depends(get_generative_client),
):
    outcome = await inventory_insights_outcome(
        config, request.products, cache=cache, client=client
    )
    return describe(outcome, "insight")


@router.post("/insights/clients")
async def clients_insights(
    request: ClientsRequest,
    config: AIConfig = Depends(get_ai_config),
    cache: InsightCache = Depends(get_cache),
    client: GenerativeClient = Depends(get_generative_client),
):
    outcome = await client_insights_outcome(
        config, request.clients, cache=cache, client=client
    )
    return describe(outcome, "insight")


@router.post("/insights/suppliers")
async def suppliers_insights(
    request: SuppliersRequest,
    config: AIConfig = Depends(get_ai_config),
    cache: InsightCache = Depends(get_cache),
    client: GenerativeClient = Depends(get_generative_client),
):
    outcome = await supplier_insights_outcome(
        config, request.suppliers, cache=cache, client=client
    )
    return describe(outcome, "insight")


@router.post("/insights/expenses")
async def expenses_insights(
    request: ExpensesRequest,
    config: AIConfig = Depends(get_ai_config),
    cache: InsightCache = Depends(get_cache),
    client: GenerativeClient = Depends(get_generative_client),
):
    """Get the expense tip, compared against total sales."""
    outcome = await expense_insights_outcome(
        config, request.expenses, request.total_sales, cache=cache, client=client
    )
    return describe(outcome, "tips")


@router.delete("/insights/cache")
async def clear_insights_cache(cache: InsightCache = Depends(get_cache)):
    """Drop every cached insight so the next request regenerates it."""
    return {"cleared": cache.clear()}
