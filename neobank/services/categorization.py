"""
Keyword-based transaction categorization.

categorize() maps a ledger entry to a spending category using only the
entry itself — no I/O, no clock — so the same entry always gets the same
answer.

Rules, in order:
  1. A category the user chose explicitly (anything except "Other") wins.
  2. Money received, or a description that reads like income, is "Income".
  3. The lowercased description is checked against the keyword sets below,
     in their listed order; the first set with a substring hit wins. Some
     keywords overlap between sets ("delivery", "bill"), so the order is
     part of the contract.
  4. Everything else is "Other".

Works with ORM Transaction rows or any object exposing category,
description and direction attributes.
"""

from neobank.models.transaction import DEFAULT_CATEGORY

INCOME_CATEGORY = "Income"

INCOME_KEYWORDS = ("salary", "income", "credit", "deposit", "bonus", "refund")

# Ordered: first match wins
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Food", (
        "restaurant", "food", "dining", "swiggy", "zomato", "uber eats", "pizza",
        "cafe", "coffee", "delivery", "kitchen", "dine",
    )),
    ("Shopping", (
        "amazon", "flipkart", "myntra", "store", "shopping", "mart", "buy",
        "purchase", "mall", "outlet",
    )),
    ("Travel", (
        "uber", "ola", "taxi", "flight", "train", "bus", "travel", "transport",
        "metro", "auto", "cab", "petrol", "diesel", "fuel", "gas",
    )),
    ("Bills", (
        "bill", "electric", "water", "internet", "mobile", "postpaid", "rent",
        "emi", "utility", "broadband",
    )),
    ("Entertainment", (
        "netflix", "spotify", "hotstar", "zee", "movie", "ticket", "entertainment",
        "game", "ott", "subscription",
    )),
    ("Health", (
        "pharmacy", "medical", "hospital", "clinic", "health", "doctor", "medicine",
        "apollo", "medplus",
    )),
    ("Education", (
        "school", "college", "education", "course", "tuition", "book", "learning",
        "university",
    )),
)


def _has_keyword(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def explicit_category(transaction) -> str | None:
    """The user-chosen category, or None when it is missing or the default."""
    category = getattr(transaction, "category", None)
    if isinstance(category, str):
        category = category.strip()
        if category and category != DEFAULT_CATEGORY:
            return category
    return None


def categorize(transaction) -> str:
    """Return the spending category for a single ledger entry."""
    chosen = explicit_category(transaction)
    if chosen:
        return chosen

    description = (getattr(transaction, "description", None) or "").lower()

    if getattr(transaction, "direction", None) == "received" or _has_keyword(description, INCOME_KEYWORDS):
        return INCOME_CATEGORY

    for category, keywords in CATEGORY_KEYWORDS:
        if _has_keyword(description, keywords):
            return category

    return DEFAULT_CATEGORY
