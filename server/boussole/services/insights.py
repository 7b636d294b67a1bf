"""AI insight generators for the dashboard, inventory, clients, suppliers and expenses.

Every generator follows the same path: derive a cache key from aggregate
fingerprints of the input, serve a cached value when one exists, otherwise
build a prompt, call Gemini, shape the reply and cache it. Failures never
reach the caller; each generator has fixed Arabic fallbacks.
"""

import re
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from ..config import AIConfig
from ..models import Client, Expense, Product, SalesPoint, Supplier
from .cache import CachedValue, InsightCache, Text, Tips, get_insight_cache
from .gemini import GenerativeClient
from .prompts import build_analyst_prompt, build_dashboard_context, build_dashboard_prompt

logger = logging.getLogger(__name__)

MAX_TIPS = 3
DEAD_STOCK_THRESHOLD = 20  # units; high for a boutique
DEAD_STOCK_LIMIT = 5
LOW_STOCK_THRESHOLD = 5
OVERSTOCK_THRESHOLD = 50
CASH_COW_MIN_PRICE = 2000

TREND_RISING = "صاعد"
TREND_FALLING = "هابط"
TREND_STABLE = "مستقر"

_BULLET_LINE = re.compile(r"^(?:[-*]|\d\.)")
_BULLET_MARKER = re.compile(r"^[-*\d.]+\s*")


# ----------------------------------------------------------------------
# Outcomes
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Ok:
    """A usable insight, fresh from the model or served from cache."""
    value: Any
    source: str = "ai"


@dataclass(frozen=True)
class Fallback:
    """A fixed fallback value and why it was used."""
    value: Any
    reason: str  # not_configured | empty_response | error


InsightOutcome = Union[Ok, Fallback]


@dataclass(frozen=True)
class InsightKind:
    """Per-endpoint cache variant and fallback values."""
    name: str
    variant: type
    not_configured: Any
    empty: Any
    error: Any


DASHBOARD = InsightKind(
    name="dashboard",
    variant=Tips,
    not_configured=("يرجى إضافة مفتاح API لتفعيل التوصيات الذكية.",),
    empty=(
        "راجع المنتجات المكدسة وقم بعمل تصفية.",
        "ركز على بيع المنتجات ذات الهامش الربحي العالي.",
        "راقب السيولة النقدية يومياً.",
    ),
    error=(
        "ركز على المنتجات الأكثر مبيعاً لزيادة السيولة.",
        "تخلص من المخزون الراكد بعروض خاصة.",
        "راقب المصاريف التشغيلية بدقة.",
    ),
)

INVENTORY = InsightKind(
    name="inventory",
    variant=Text,
    not_configured="تحليل المخزون غير متاح حالياً.",
    empty="راجع المنتجات الراكدة وحاول تحريكها بعروض.",
    error="قم بجرد المخزون وتحديث الكميات لضمان دقة التحليل.",
)

CLIENTS = InsightKind(
    name="clients",
    variant=Text,
    not_configured="",
    empty="تابع ديون العملاء بانتظام.",
    error="",
)

SUPPLIERS = InsightKind(
    name="suppliers",
    variant=Text,
    not_configured="",
    empty="حاول التفاوض على فترات سداد أطول.",
    error="",
)

EXPENSES = InsightKind(
    name="expenses",
    variant=Tips,
    not_configured=(),
    empty=("تحكم في المصاريف المتغيرة لزيادة الربحية.",),
    error=("راجع بنود الصرف الأعلى تكلفة.",),
)


# ----------------------------------------------------------------------
# Fingerprints and derived figures
# ----------------------------------------------------------------------
def plain_number(value: float) -> Union[int, float]:
    """Drop the fractional part of integral floats (250.0 -> 250)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def cache_key(tag: str, *fingerprints: float) -> str:
    """Namespace tag joined with numeric fingerprints, e.g. ``inv_3_42``."""
    return "_".join([tag] + [str(plain_number(float(f))) for f in fingerprints])


def stock_value(products: Sequence[Product]) -> float:
    return sum(p.cost * p.stock for p in products)


def find_dead_stock(products: Sequence[Product]) -> list[Product]:
    """Overstocked items tying up the most capital, largest first."""
    candidates = [p for p in products if p.stock > DEAD_STOCK_THRESHOLD]
    candidates.sort(key=lambda p: p.cost * p.stock, reverse=True)
    return candidates[:DEAD_STOCK_LIMIT]


def find_cash_cows(products: Sequence[Product]) -> list[str]:
    """Names of expensive items that are about to run out."""
    return [
        p.name for p in products
        if p.stock < LOW_STOCK_THRESHOLD and p.price > CASH_COW_MIN_PRICE
    ]


def sales_trend(chart: Sequence[SalesPoint]) -> str:
    """Compare the last two chart points."""
    if len(chart) < 2:
        return TREND_STABLE
    return TREND_RISING if chart[-1].sales > chart[-2].sales else TREND_FALLING


def extract_tips(text: Optional[str], limit: int = MAX_TIPS) -> list[str]:
    """Keep bullet lines (``-``, ``*`` or ``N.``) and strip their markers."""
    lines = [
        line for line in (text or "").split("\n")
        if line.strip() and _BULLET_LINE.match(line)
    ]
    return [_BULLET_MARKER.sub("", line, count=1).strip() for line in lines[:limit]]


def _to_cached(kind: InsightKind, value: Any) -> CachedValue:
    if kind.variant is Tips:
        return Tips(tuple(value))
    return Text(value)


def _to_public(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


# ----------------------------------------------------------------------
# Shared generation path
# ----------------------------------------------------------------------
async def _generate(
    kind: InsightKind,
    config: AIConfig,
    make_key: Callable[[], str],
    make_prompt: Callable[[], str],
    shape: Callable[[str], Any],
    cache: Optional[InsightCache],
    client: Optional[GenerativeClient],
) -> InsightOutcome:
    if not config.enabled:
        return Fallback(kind.not_configured, "not_configured")

    try:
        key = make_key()
        cache = cache or get_insight_cache()

        cached = cache.get(key, kind.variant)
        if cached is not None and cached.value:
            return Ok(cached.value, source="cache")

        client = client or GenerativeClient(config)
        raw = await client.generate(make_prompt())

        value = shape(raw)
        if value:
            outcome: InsightOutcome = Ok(value)
        else:
            logger.info("insight_empty_response", extra={"insight": kind.name})
            outcome = Fallback(kind.empty, "empty_response")

        cache.set(key, _to_cached(kind, outcome.value))
        return outcome
    except Exception as e:
        logger.warning(
            "insight_generation_failed",
            extra={"insight": kind.name, "err": str(e)},
        )
        return Fallback(kind.error, "error")


def _single_text(raw: str) -> str:
    return (raw or "").strip()


def _tips(raw: str) -> tuple[str, ...]:
    return tuple(extract_tips(raw))


def _one_tip(raw: str) -> tuple[str, ...]:
    text = _single_text(raw)
    return (text,) if text else ()


def _dump(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False)


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------
def dashboard_cache_key(sales_chart: Sequence[SalesPoint], products: Sequence[Product]) -> str:
    total_sales = sum(s.sales or 0 for s in sales_chart)
    return cache_key("dash_v2", stock_value(products), total_sales)


def dashboard_prompt(sales_chart: Sequence[SalesPoint], products: Sequence[Product]) -> str:
    dead_stock = [f"{p.name} ({p.stock} قطعة)" for p in find_dead_stock(products)]
    context = build_dashboard_context(
        total_stock_value=stock_value(products),
        sales_trend=sales_trend(sales_chart),
        dead_stock=dead_stock,
        cash_cows=find_cash_cows(products),
    )
    return build_dashboard_prompt(context)


async def dashboard_insights_outcome(
    config: AIConfig,
    sales_chart: Sequence[SalesPoint],
    products: Sequence[Product],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> InsightOutcome:
    return await _generate(
        DASHBOARD,
        config,
        make_key=lambda: dashboard_cache_key(sales_chart, products),
        make_prompt=lambda: dashboard_prompt(sales_chart, products),
        shape=_tips,
        cache=cache,
        client=client,
    )


async def get_dashboard_insights(
    config: AIConfig,
    sales_chart: Sequence[SalesPoint],
    products: Sequence[Product],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> list[str]:
    """Three cash-flow decisions for the dashboard."""
    outcome = await dashboard_insights_outcome(config, sales_chart, products, cache, client)
    return _to_public(outcome.value)


# ----------------------------------------------------------------------
# Inventory
# ----------------------------------------------------------------------
def inventory_cache_key(products: Sequence[Product]) -> str:
    return cache_key("inv", len(products), sum(p.stock for p in products))


def inventory_context(products: Sequence[Product]) -> str:
    return _dump({
        "total_inventory_value": plain_number(float(stock_value(products))),
        "total_items_count": len(products),
        "low_stock_items": [p.name for p in products if p.stock < LOW_STOCK_THRESHOLD],
        "overstocked_items": [p.name for p in products if p.stock > OVERSTOCK_THRESHOLD],
        "categories_available": list(dict.fromkeys(p.category for p in products)),
        "sample_products": [
            {"name": p.name, "margin": plain_number(float(p.price - p.cost))}
            for p in products[:10]
        ],
    })


async def inventory_insights_outcome(
    config: AIConfig,
    products: Sequence[Product],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> InsightOutcome:
    return await _generate(
        INVENTORY,
        config,
        make_key=lambda: inventory_cache_key(products),
        make_prompt=lambda: build_analyst_prompt(inventory_context(products)),
        shape=_single_text,
        cache=cache,
        client=client,
    )


async def get_inventory_insights(
    config: AIConfig,
    products: Sequence[Product],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> str:
    outcome = await inventory_insights_outcome(config, products, cache, client)
    return outcome.value


# ----------------------------------------------------------------------
# Clients
# ----------------------------------------------------------------------
def clients_cache_key(clients: Sequence[Client]) -> str:
    return cache_key("cli", len(clients), sum(c.debt for c in clients))


def clients_context(clients: Sequence[Client]) -> str:
    debtors = [
        {"name": c.name, "debt": plain_number(float(c.debt))}
        for c in clients if c.debt > 0
    ]
    return _dump({
        "total_clients": len(clients),
        "total_outstanding_debt": plain_number(float(sum(c.debt for c in clients))),
        "top_debtors": debtors[:5],
    })


async def client_insights_outcome(
    config: AIConfig,
    clients: Sequence[Client],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> InsightOutcome:
    return await _generate(
        CLIENTS,
        config,
        make_key=lambda: clients_cache_key(clients),
        make_prompt=lambda: build_analyst_prompt(clients_context(clients)),
        shape=_single_text,
        cache=cache,
        client=client,
    )


async def get_client_insights(
    config: AIConfig,
    clients: Sequence[Client],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> str:
    outcome = await client_insights_outcome(config, clients, cache, client)
    return outcome.value


# ----------------------------------------------------------------------
# Suppliers
# ----------------------------------------------------------------------
def suppliers_cache_key(suppliers: Sequence[Supplier]) -> str:
    return cache_key("sup", len(suppliers), sum(s.debt for s in suppliers))


def suppliers_context(suppliers: Sequence[Supplier]) -> str:
    creditors = [
        {"name": s.name, "amount_we_owe": plain_number(float(s.debt))}
        for s in suppliers if s.debt > 0
    ]
    return _dump({
        "total_suppliers": len(suppliers),
        "total_debt_to_suppliers": plain_number(float(sum(s.debt for s in suppliers))),
        "suppliers_we_owe_money": creditors,
    })


async def supplier_insights_outcome(
    config: AIConfig,
    suppliers: Sequence[Supplier],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> InsightOutcome:
    return await _generate(
        SUPPLIERS,
        config,
        make_key=lambda: suppliers_cache_key(suppliers),
        make_prompt=lambda: build_analyst_prompt(suppliers_context(suppliers)),
        shape=_single_text,
        cache=cache,
        client=client,
    )


async def get_supplier_insights(
    config: AIConfig,
    suppliers: Sequence[Supplier],
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> str:
    outcome = await supplier_insights_outcome(config, suppliers, cache, client)
    return outcome.value


# ----------------------------------------------------------------------
# Expenses
# ----------------------------------------------------------------------
def expenses_cache_key(expenses: Sequence[Expense], total_sales: float) -> str:
    return cache_key("exp", len(expenses), total_sales)


def expenses_context(expenses: Sequence[Expense], total_sales: float) -> str:
    total = sum(e.amount for e in expenses)
    ratio = (total / total_sales) * 100 if total_sales > 0 else 0
    top = sorted(expenses, key=lambda e: e.amount, reverse=True)[:3]
    return _dump({
        "total_sales_period": plain_number(float(total_sales)),
        "total_expenses": plain_number(float(total)),
        "expense_to_sales_ratio": f"{ratio:.1f}%",
        "top_expenses": [
            {"title": e.title, "amount": plain_number(float(e.amount))} for e in top
        ],
    })


async def expense_insights_outcome(
    config: AIConfig,
    expenses: Sequence[Expense],
    total_sales: float,
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> InsightOutcome:
    return await _generate(
        EXPENSES,
        config,
        make_key=lambda: expenses_cache_key(expenses, total_sales),
        make_prompt=lambda: build_analyst_prompt(expenses_context(expenses, total_sales)),
        shape=_one_tip,
        cache=cache,
        client=client,
    )


async def get_expense_insights(
    config: AIConfig,
    expenses: Sequence[Expense],
    total_sales: float,
    cache: Optional[InsightCache] = None,
    client: Optional[GenerativeClient] = None,
) -> list[str]:
    outcome = await expense_insights_outcome(config, expenses, total_sales, cache, client)
    return _to_public(outcome.value)
