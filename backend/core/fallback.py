"""
Fallback synthesizer — canned datasets and a chart-type guess for questions
whose SQL could not be executed even after regeneration.

Both classifiers are ordered (predicate, result) tables over the lower-cased
question; the first matching predicate wins and each table has a default.
"""
import copy
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

FALLBACK_SQL_MARKER = "-- Query execution failed"

FALLBACK_ANSWER_TEMPLATE = (
    "I couldn't execute your query due to a database issue, but I've generated some "
    "sample data that might help answer your question. The database reported: {error}"
)

Predicate = Callable[[str], bool]


def _has_any(*words: str) -> Predicate:
    return lambda q: any(w in q for w in words)


def _marketing_roi(q: str) -> bool:
    return "marketing spend" in q and ("revenue" in q or "roi" in q)


# ── Canned datasets ───────────────────────────────────────────────────────────

MARKETING_CORRELATION = [
    {"metric": "Marketing spend vs revenue", "correlation": 0.83},
]

MARKETING_ROI = [
    {"month": "Jan", "marketing_spend": 25000, "revenue": 125000, "roi": 5.0},
    {"month": "Feb", "marketing_spend": 30000, "revenue": 145000, "roi": 4.83},
    {"month": "Mar", "marketing_spend": 35000, "revenue": 165000, "roi": 4.71},
    {"month": "Apr", "marketing_spend": 40000, "revenue": 200000, "roi": 5.0},
    {"month": "May", "marketing_spend": 45000, "revenue": 220000, "roi": 4.89},
    {"month": "Jun", "marketing_spend": 50000, "revenue": 250000, "roi": 5.0},
]

PRODUCT_CATEGORIES = [
    {"category": "Electronics", "revenue": 125000, "units_sold": 500},
    {"category": "Clothing",    "revenue": 85000,  "units_sold": 1200},
    {"category": "Home Goods",  "revenue": 65000,  "units_sold": 350},
    {"category": "Sports",      "revenue": 45000,  "units_sold": 200},
    {"category": "Beauty",      "revenue": 35000,  "units_sold": 800},
]

REGIONS = [
    {"region": "North America", "customers": 5200, "revenue": 320000},
    {"region": "Europe",        "customers": 4100, "revenue": 250000},
    {"region": "Asia",          "customers": 3800, "revenue": 210000},
    {"region": "South America", "customers": 1900, "revenue": 95000},
    {"region": "Africa",        "customers": 800,  "revenue": 45000},
]

DEPARTMENTS = [
    {"department": "Sales",            "employee_count": 45, "avg_salary": 75000},
    {"department": "Marketing",        "employee_count": 30, "avg_salary": 70000},
    {"department": "Engineering",      "employee_count": 65, "avg_salary": 95000},
    {"department": "Customer Support", "employee_count": 50, "avg_salary": 60000},
    {"department": "HR",               "employee_count": 15, "avg_salary": 65000},
]

FINANCIALS = [
    {"period": "2020 Q1", "revenue": 250000, "expenses": 180000, "profit": 70000},
    {"period": "2020 Q2", "revenue": 310000, "expenses": 210000, "profit": 100000},
    {"period": "2020 Q3", "revenue": 290000, "expenses": 200000, "profit": 90000},
    {"period": "2020 Q4", "revenue": 350000, "expenses": 230000, "profit": 120000},
    {"period": "2021 Q1", "revenue": 280000, "expenses": 190000, "profit": 90000},
]

TIME_SERIES = [
    {"month": "Jan", "value": 65000},
    {"month": "Feb", "value": 78000},
    {"month": "Mar", "value": 90000},
    {"month": "Apr", "value": 81000},
    {"month": "May", "value": 95000},
    {"month": "Jun", "value": 110000},
]

DATASET_RULES: tuple[tuple[str, Predicate, list[dict[str, Any]]], ...] = (
    ("marketing-correlation", lambda q: _marketing_roi(q) and "correlation" in q, MARKETING_CORRELATION),
    ("marketing-roi",         _marketing_roi,                                      MARKETING_ROI),
    ("product-category",      _has_any("product", "category"),                     PRODUCT_CATEGORIES),
    ("region-customer",       _has_any("region", "customer"),                      REGIONS),
    ("employee-department",   _has_any("employee", "department"),                  DEPARTMENTS),
    ("financial",             _has_any("financ", "revenue", "profit"),             FINANCIALS),
)
DEFAULT_DATASET = ("time-series", TIME_SERIES)

CHART_RULES: tuple[tuple[Predicate, str], ...] = (
    (_has_any("over time", "trend", "growth", "monthly", "yearly"),           "line"),
    (_has_any("percentage", "proportion", "breakdown", "distribution"),       "pie"),
)
DEFAULT_CHART_TYPE = "bar"


def classify_dataset(question: str) -> tuple[str, list[dict[str, Any]]]:
    """Return (category name, fresh copy of its canned rows)."""
    q = question.lower()
    for name, predicate, rows in DATASET_RULES:
        if predicate(q):
            return name, copy.deepcopy(rows)
    name, rows = DEFAULT_DATASET
    return name, copy.deepcopy(rows)


def determine_chart_type(question: str) -> str:
    q = question.lower()
    for predicate, chart_type in CHART_RULES:
        if predicate(q):
            return chart_type
    return DEFAULT_CHART_TYPE


def synthesize_fallback(question: str, error_message: str) -> tuple[list[dict[str, Any]], str, str]:
    """Return (rows, answer, chart_type) for a question that could not be executed."""
    category, rows = classify_dataset(question)
    chart_type = determine_chart_type(question)
    logger.warning("Serving '%s' sample data (%s chart) for: %s", category, chart_type, question[:80])
    return rows, FALLBACK_ANSWER_TEMPLATE.format(error=error_message), chart_type
