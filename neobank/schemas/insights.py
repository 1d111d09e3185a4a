"""
Pydantic schemas for GET /insights.

Spend maps are keyed by category name and hold integer cents.
"""

from datetime import datetime

from pydantic import BaseModel


class PeriodBounds(BaseModel):
    start: datetime
    end: datetime


class InsightsPeriod(BaseModel):
    this_month: PeriodBounds
    last_month: PeriodBounds


class RecurringExpense(BaseModel):
    description: str
    count: int


class Suggestion(BaseModel):
    title: str
    detail: str
    category: str
    priority: str
    emoji: str
    type: str


class SpendingSummary(BaseModel):
    total_balance_cents: int
    current_spending_cents: int
    remaining_balance_cents: int
    balance_usage_percentage: float
    category_limits: dict[str, int]


class InsightsResponse(BaseModel):
    period: InsightsPeriod
    category_spend: dict[str, int]
    category_spend_last: dict[str, int]
    surplus_this_month: int
    recurring: list[RecurringExpense]
    suggestions: list[Suggestion]
    spending_summary: SpendingSummary
