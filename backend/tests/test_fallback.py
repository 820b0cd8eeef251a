import pytest

from core.fallback import (
    FALLBACK_ANSWER_TEMPLATE,
    PRODUCT_CATEGORIES,
    classify_dataset,
    determine_chart_type,
    synthesize_fallback,
)
from core.result_shaper import shape_rows


@pytest.mark.parametrize("question, category", [
    ("What is the correlation between marketing spend and revenue?", "marketing-correlation"),
    ("Show marketing spend vs ROI per month", "marketing-roi"),
    ("Top product categories by sales", "product-category"),
    ("Which region has the most customers?", "region-customer"),
    ("Average salary per department", "employee-department"),
    ("Quarterly profit and expenses", "financial"),
    ("How did revenue evolve?", "financial"),
    ("How many widgets did we ship?", "time-series"),
])
def test_dataset_rules_first_match_wins(question, category):
    name, rows = classify_dataset(question)
    assert name == category
    assert rows


def test_marketing_spend_alone_is_not_marketing_category():
    # "marketing spend" without revenue/ROI falls through to later rules
    name, _ = classify_dataset("marketing spend by department")
    assert name == "employee-department"


def test_datasets_are_copies():
    _, rows = classify_dataset("product sales")
    rows[0]["revenue"] = -1
    assert PRODUCT_CATEGORIES[0]["revenue"] == 125000


@pytest.mark.parametrize("question, chart_type", [
    ("Show the monthly trend of orders", "line"),
    ("Revenue growth over time", "line"),
    ("Yearly signups", "line"),
    ("Give me a breakdown of spend by platform", "pie"),
    ("What percentage of orders ship late?", "pie"),
    ("Distribution of customers by country", "pie"),
    ("Top 5 products by revenue", "bar"),
])
def test_chart_type_rules(question, chart_type):
    assert determine_chart_type(question) == chart_type


def test_synthesize_fallback_embeds_error():
    rows, answer, chart_type = synthesize_fallback("Revenue breakdown by category", 'column "x" does not exist')
    assert rows[0]["category"] == "Electronics"
    assert answer == FALLBACK_ANSWER_TEMPLATE.format(error='column "x" does not exist')
    assert 'column "x" does not exist' in answer
    assert chart_type == "pie"


def test_label_first_datasets_shape_to_named_records():
    _, correlation = classify_dataset("correlation of marketing spend and revenue")
    assert shape_rows(correlation) == [{"name": "Marketing spend vs revenue", "value": 0.83}]

    _, financials = classify_dataset("quarterly profit")
    assert shape_rows(financials)[0] == {"name": "2020 Q1", "revenue": 250000, "expenses": 180000, "profit": 70000}
