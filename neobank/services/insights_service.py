"""
Insights service — monthly spending analysis and budget alerts.

Two layers live here:

  Pure computation (no I/O; "now" is always passed in):
    - category_spending()     per-category spend for one calendar month
    - generate_insights()     ranked alerts, at most five
    - get_spending_summary()  figures for the dashboard

  Read path (touches the database):
    - backfill_categories()   one-time category correction on stored entries
    - build_insights_report() everything GET /insights returns

Budget model:
  Each spending category gets a limit expressed as a percentage of a
  "baseline" balance:

    1. the user's current total balance, when positive
    2. else the sum of their 5 most recent incoming payments
    3. else 1.5x what they have spent this month

Priorities are "high", "medium" and "low". The final list is ordered by
priority with ties kept in the order the insights were produced, then cut
to five entries.

All amounts are integer cents; thresholds below are in cents too.
"""

import logging
import uuid
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from neobank.config import settings
from neobank.models.transaction import DEFAULT_CATEGORY, Transaction
from neobank.services import account_service
from neobank.services.categorization import categorize

logger = logging.getLogger(__name__)

# Spending limits as a percentage of the baseline balance (ordered)
CATEGORY_LIMITS: dict[str, int] = {
    "Food": 25,
    "Shopping": 15,
    "Travel": 10,
    "Bills": 20,
    "Entertainment": 8,
    "Health": 5,
    "Education": 10,
    "Other": 10,
}

CATEGORY_EMOJIS: dict[str, str] = {
    "Food": "🍔",
    "Shopping": "🛒",
    "Travel": "🚌",
    "Bills": "💡",
    "Entertainment": "🎭",
    "Health": "🏥",
    "Education": "📚",
    "Income": "💰",
    "Other": "💳",
}

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}
MAX_INSIGHTS = 5

RECENT_CREDITS_FOR_BASELINE = 5
SPEND_TO_BALANCE_FACTOR = 1.5

TREND_INCREASE_PERCENT = 20
SAVINGS_DECREASE_PERCENT = 15
SAVINGS_MIN_CENTS = 500_00
HIGH_SPENDING_PERCENT = 80
GOOD_BALANCE_PERCENT = 30
LOW_BALANCE_PERCENT = 20
BILL_SPIKE_MIN_CENTS = 800_00
UNUSUAL_MULTIPLIER = 2.2
UNUSUAL_MIN_CENTS = 3_000_00

# (insight type, category, increase percent that must be exceeded, message, detail)
SPECIFIC_TIPS: tuple[tuple[str, str, float, str, str], ...] = (
    (
        "food_insight", "Food", 15,
        "Your food expenses increased by {pct:.0f}% compared to last month",
        "Consider cooking at home more often to save money",
    ),
    (
        "shopping_insight", "Shopping", 25,
        "Your shopping expenses are {pct:.0f}% higher than last month",
        "Try to reduce impulse purchases and stick to a shopping list",
    ),
    (
        "travel_insight", "Travel", 100,
        "Your travel expenses are {pct:.0f}% higher than last month 🚕",
        "Consider using public transport or carpooling to save money",
    ),
)


@dataclass
class InsightRecord:
    type: str
    category: str
    emoji: str
    message: str
    detail: str
    priority: str
    payload: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = asdict(self)
        data.update(data.pop("payload"))
        return data


# ---------------------------------------------------------------------------
# Month arithmetic
# ---------------------------------------------------------------------------

def as_naive_utc(value: datetime) -> datetime:
    """Stored timestamps come back naive (UTC); normalize aware ones to match."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def month_start(value: datetime, months_back: int = 0) -> datetime:
    """First instant of the month `months_back` months before value's month (naive UTC)."""
    value = as_naive_utc(value)
    index = value.year * 12 + (value.month - 1) - months_back
    return datetime(index // 12, index % 12 + 1, 1)


def _in_month(created_at: datetime | None, start: datetime) -> bool:
    if created_at is None:
        return False
    created_at = as_naive_utc(created_at)
    return (created_at.year, created_at.month) == (start.year, start.month)


def _money(cents: float) -> str:
    return f"{settings.CURRENCY_SYMBOL}{cents / 100:,.0f}"


# ---------------------------------------------------------------------------
# Pure aggregation
# ---------------------------------------------------------------------------

def category_spending(transactions, month: datetime) -> dict[str, int]:
    """Sum of "sent" amounts per category for the calendar month containing `month`."""
    start = month_start(month)
    spending: dict[str, int] = {}
    for txn in transactions:
        if txn.direction != "sent" or not _in_month(txn.created_at, start):
            continue
        category = categorize(txn)
        spending[category] = spending.get(category, 0) + (txn.amount_cents or 0)
    return spending


def monthly_income(transactions, month: datetime) -> int:
    start = month_start(month)
    return sum(
        txn.amount_cents or 0
        for txn in transactions
        if txn.direction == "received" and _in_month(txn.created_at, start)
    )


def estimate_baseline(transactions, current_balance_cents: int, current_spending: dict[str, int]) -> float:
    if current_balance_cents > 0:
        return float(current_balance_cents)

    credits = sorted(
        (txn for txn in transactions if txn.direction == "received" and txn.created_at is not None),
        key=lambda txn: as_naive_utc(txn.created_at),
        reverse=True,
    )[:RECENT_CREDITS_FOR_BASELINE]
    recent_total = sum(txn.amount_cents or 0 for txn in credits)
    if recent_total > 0:
        return float(recent_total)

    return sum(current_spending.values()) * SPEND_TO_BALANCE_FACTOR


def _percent_change(now_amount: float, last_amount: float) -> float:
    return (now_amount - last_amount) * 100 / last_amount


def _category_insights(category, current, last, baseline) -> list[InsightRecord]:
    insights = []
    emoji = CATEGORY_EMOJIS[category]
    limit_percent = CATEGORY_LIMITS[category]
    limit_amount = baseline * limit_percent / 100

    if current > 0 and baseline > 0 and current > limit_amount:
        overspend = current - limit_amount
        insights.append(InsightRecord(
            type="overspend",
            category=category,
            emoji=emoji,
            message=f"You are overspending on {category.lower()} this month {emoji}",
            detail=(
                f"You spent {_money(current)} ({current * 100 / baseline:.1f}% of balance) "
                f"vs limit of {_money(limit_amount)} ({limit_percent}%)"
            ),
            priority="high",
            payload={
                "overspend_amount_cents": round(overspend),
                "overspend_percent": round(overspend * 100 / limit_amount, 2),
            },
        ))

    if last > 0 and current > last:
        increase = _percent_change(current, last)
        if increase >= TREND_INCREASE_PERCENT:
            insights.append(InsightRecord(
                type="spending_trend_increase",
                category=category,
                emoji=emoji,
                message=(
                    f"You've spent {increase:.0f}% more on {category.lower()} this month "
                    f"compared to last month"
                ),
                detail=(
                    f"This month: {_money(current)} • Last month: {_money(last)}. "
                    f"Consider reviewing for deals or alternatives."
                ),
                priority="medium",
                payload={"increase_percent": round(increase, 2)},
            ))

    if last > 0 and current < last:
        decrease = (last - current) * 100 / last
        saved = last - current
        if decrease > SAVINGS_DECREASE_PERCENT and saved > SAVINGS_MIN_CENTS:
            insights.append(InsightRecord(
                type="savings",
                category=category,
                emoji="🎉",
                message=f"Great job! You saved {_money(saved)} on {category.lower()} this month",
                detail=f"That's {decrease:.0f}% less than last month",
                priority="low",
                payload={"saved_amount_cents": saved},
            ))

    return insights


def _general_insights(total_spending, baseline) -> list[InsightRecord]:
    if baseline <= 0:
        return []

    insights = []
    spending_ratio = total_spending * 100 / baseline
    remaining = baseline - total_spending
    remaining_percent = remaining * 100 / baseline

    if spending_ratio > HIGH_SPENDING_PERCENT:
        insights.append(InsightRecord(
            type="high_spending",
            category="General",
            emoji="⚠️",
            message=f"You spent {spending_ratio:.0f}% of your balance this month ⚠️",
            detail="Try to keep spending below 70% to maintain healthy balance",
            priority="high",
            payload={"spending_percent": round(spending_ratio, 2)},
        ))

    if remaining_percent > GOOD_BALANCE_PERCENT:
        insights.append(InsightRecord(
            type="good_balance",
            category="Balance",
            emoji="🎉",
            message=f"You maintained {remaining_percent:.0f}% of your balance this month 🎉",
            detail=f"Remaining balance: {_money(remaining)}",
            priority="low",
            payload={"remaining_percent": round(remaining_percent, 2)},
        ))
    elif 0 < remaining_percent < LOW_BALANCE_PERCENT:
        insights.append(InsightRecord(
            type="low_balance",
            category="Balance",
            emoji="💡",
            message="Your balance is running low – try to cut down on spending",
            detail=f"Only {remaining_percent:.0f}% of your balance remaining ({_money(remaining)})",
            priority="medium",
            payload={"remaining_percent": round(remaining_percent, 2)},
        ))

    return insights


def _top_category_insight(current_spending, total_spending) -> InsightRecord | None:
    ranked = sorted(current_spending.items(), key=lambda item: item[1], reverse=True)[:3]
    if not ranked:
        return None

    top_category, top_amount = ranked[0]
    share = top_amount * 100 / total_spending if total_spending > 0 else 0
    breakdown = ", ".join(f"{category} ({_money(amount)})" for category, amount in ranked)
    return InsightRecord(
        type="top_category",
        category=top_category,
        emoji="📊",
        message=(
            f"{top_category} was your top expense this month, totaling "
            f"{_money(top_amount)} ({share:.0f}% of spending)"
        ),
        detail=f"Top 3: {breakdown}",
        priority="low",
        payload={"share_percent": round(share, 2)},
    )


def _specific_tips(current_spending, last_spending) -> list[InsightRecord]:
    insights = []
    for insight_type, category, threshold, message, detail in SPECIFIC_TIPS:
        current = current_spending.get(category, 0)
        last = last_spending.get(category, 0)
        if current > 0 and last > 0:
            increase = _percent_change(current, last)
            if increase > threshold:
                insights.append(InsightRecord(
                    type=insight_type,
                    category=category,
                    emoji=CATEGORY_EMOJIS[category],
                    message=message.format(pct=increase),
                    detail=detail,
                    priority="medium",
                ))
    return insights


def _bill_spike_insight(current_spending, last_spending) -> InsightRecord | None:
    bills_now = current_spending.get("Bills", 0)
    bills_prev = last_spending.get("Bills", 0)
    if bills_prev <= 0 or bills_now <= bills_prev:
        return None

    delta = bills_now - bills_prev
    if delta < BILL_SPIKE_MIN_CENTS:
        return None
    return InsightRecord(
        type="bill_spike",
        category="Bills",
        emoji="💡",
        message=f"Your bills increased by {_money(delta)} this month",
        detail=(
            f"This month: {_money(bills_now)} • Last month: {_money(bills_prev)}. "
            f"Consider checking usage or plan changes."
        ),
        priority="medium",
        payload={"increase_cents": delta},
    )


def _eom_summary_insight(total_spending, last_total) -> InsightRecord | None:
    if total_spending <= 0 and last_total <= 0:
        return None

    diff = total_spending - last_total
    if diff < 0:
        comparison = f", {_money(-diff)} less than last month"
    elif diff > 0:
        comparison = f", {_money(diff)} more than last month"
    else:
        comparison = ""
    return InsightRecord(
        type="eom_summary",
        category="General",
        emoji="🗓️",
        message=f"This month you spent {_money(total_spending)}{comparison}",
        detail=f"Last month spending: {_money(last_total)}. Keep tracking your progress.",
        priority="low",
        payload={"difference_cents": diff},
    )


def _unusual_activity_insights(current_spending, last_spending) -> list[InsightRecord]:
    insights = []
    for category in CATEGORY_LIMITS:
        current = current_spending.get(category, 0)
        previous = last_spending.get(category, 0)
        if previous > 0 and current >= previous * UNUSUAL_MULTIPLIER and current >= UNUSUAL_MIN_CENTS:
            insights.append(InsightRecord(
                type="unusual_activity",
                category=category,
                emoji="⚠️",
                message=(
                    f"Unusual {category.lower()} activity: {_money(current)} "
                    f"vs usual ~{_money(previous)}"
                ),
                detail=(
                    "This is significantly higher than last month. "
                    "Did you have a special event or travel?"
                ),
                priority="high",
            ))
    return insights


def generate_insights(
    transactions,
    current_balance_cents: int,
    now: datetime,
) -> list[InsightRecord]:
    """
    Produce at most five spending insights, highest priority first.

    Args:
        transactions: Ledger entries (any object with direction, amount_cents,
            category, description and created_at).
        current_balance_cents: The user's total active balance.
        now: Defines "this month" and "last month".

    Returns:
        InsightRecord list; identical inputs give an identical list.
    """
    current_spending = category_spending(transactions, month_start(now))
    last_spending = category_spending(transactions, month_start(now, months_back=1))
    baseline = estimate_baseline(transactions, current_balance_cents, current_spending)

    insights: list[InsightRecord] = []
    for category in CATEGORY_LIMITS:
        current = current_spending.get(category, 0)
        if current <= 0:
            continue
        insights.extend(_category_insights(category, current, last_spending.get(category, 0), baseline))

    total_spending = sum(current_spending.values())
    last_total = sum(last_spending.values())

    insights.extend(_general_insights(total_spending, baseline))

    top = _top_category_insight(current_spending, total_spending)
    if top:
        insights.append(top)

    insights.extend(_specific_tips(current_spending, last_spending))

    for optional in (
        _bill_spike_insight(current_spending, last_spending),
        _eom_summary_insight(total_spending, last_total),
    ):
        if optional:
            insights.append(optional)

    insights.extend(_unusual_activity_insights(current_spending, last_spending))

    # sorted() is stable, so equal priorities keep their production order
    ranked = sorted(insights, key=lambda insight: -PRIORITY_RANK[insight.priority])
    return ranked[:MAX_INSIGHTS]


def get_spending_summary(transactions, current_balance_cents: int, now: datetime) -> dict:
    """Income and category spend for this and last month, with the limits in force."""
    current_spending = category_spending(transactions, month_start(now))
    last_spending = category_spending(transactions, month_start(now, months_back=1))
    return {
        "current_income_cents": monthly_income(transactions, now),
        "current_spending": current_spending,
        "last_month_spending": last_spending,
        "estimated_balance_cents": (
            current_balance_cents
            or round(sum(current_spending.values()) * SPEND_TO_BALANCE_FACTOR)
        ),
        "category_limits": dict(CATEGORY_LIMITS),
    }


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------

async def backfill_categories(db: AsyncSession, transactions) -> int:
    """
    Store a computed category on entries whose category is missing or "Other".

    Entries that still categorize as "Other" are left alone, so running this
    again changes nothing. Returns the number of entries updated.
    """
    updated = 0
    for txn in transactions:
        if txn.category and txn.category != DEFAULT_CATEGORY:
            continue
        predicted = categorize(txn)
        if predicted != DEFAULT_CATEGORY:
            txn.category = predicted
            updated += 1
    if updated:
        await db.flush()
        logger.info("Back-filled categories on %d transactions", updated)
    return updated


def _recurring_descriptions(transactions) -> list[dict]:
    counts = Counter((txn.description or "Unknown").lower() for txn in transactions)
    return [
        {"description": description, "count": count}
        for description, count in counts.items()
        if count >= 2
    ]


async def build_insights_report(
    db: AsyncSession,
    user_id: uuid.UUID,
    now: datetime,
    account_id: uuid.UUID | None = None,
) -> dict:
    """
    Assemble the GET /insights payload for one user.

    Pulls the user's ledger since the start of the month three months ago
    (only "sent" entries from `account_id` when one is given), back-fills
    categories, and combines stored per-category totals with the computed
    insights.
    """
    this_month = month_start(now)
    last_month = month_start(now, months_back=1)
    window_start = month_start(now, months_back=3)
    now_naive = as_naive_utc(now)

    query = (
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .where(Transaction.created_at >= window_start)
        .order_by(Transaction.created_at.desc())
    )
    if account_id is not None:
        query = query.where(Transaction.direction == "sent").where(
            Transaction.sender_account_id == account_id
        )
    transactions = list((await db.execute(query)).scalars().all())

    await backfill_categories(db, transactions)

    summary_balance = await account_service.get_balance_summary(db, user_id)
    user_balance = summary_balance["total_balance_cents"]
    summary = get_spending_summary(transactions, user_balance, now)

    spend_query = (
        select(Transaction.category, func.sum(Transaction.amount_cents))
        .where(Transaction.user_id == user_id)
        .where(Transaction.direction == "sent")
        .where(Transaction.created_at >= this_month)
        .where(Transaction.created_at <= now_naive)
        .group_by(Transaction.category)
    )
    if account_id is not None:
        spend_query = spend_query.where(Transaction.sender_account_id == account_id)
    stored_spend: dict[str, int] = {}
    for category, total in (await db.execute(spend_query)).all():
        key = category or DEFAULT_CATEGORY
        stored_spend[key] = stored_spend.get(key, 0) + (total or 0)

    if account_id is None and not stored_spend:
        category_spend = summary["current_spending"]
    else:
        category_spend = stored_spend

    insights = generate_insights(transactions, user_balance, now)

    current_sent = [
        txn for txn in transactions
        if txn.direction == "sent" and _in_month(txn.created_at, this_month)
    ]
    total_out = sum(txn.amount_cents for txn in current_sent)
    total_in = sum(
        txn.amount_cents for txn in transactions
        if txn.direction == "received" and _in_month(txn.created_at, this_month)
    )

    return {
        "period": {
            "this_month": {"start": this_month, "end": now_naive},
            "last_month": {"start": last_month, "end": this_month - timedelta(microseconds=1)},
        },
        "category_spend": category_spend,
        "category_spend_last": summary["last_month_spending"],
        "surplus_this_month": max(0, total_in - total_out),
        "recurring": _recurring_descriptions(current_sent),
        "suggestions": [
            {
                "title": insight.message,
                "detail": insight.detail,
                "category": insight.category,
                "priority": insight.priority,
                "emoji": insight.emoji,
                "type": insight.type,
            }
            for insight in insights
        ],
        "spending_summary": {
            "total_balance_cents": user_balance,
            "current_spending_cents": total_out,
            "remaining_balance_cents": user_balance - total_out,
            "balance_usage_percentage": (
                round(total_out * 100 / user_balance, 2) if user_balance > 0 else 0
            ),
            "category_limits": summary["category_limits"],
        },
    }
