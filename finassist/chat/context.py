from collections import defaultdict
from datetime import datetime, timedelta

from finassist.models.schemas import (
    CreditCard,
    FinancialData,
    Objective,
    Transaction,
)

SUMMARY_WINDOW = timedelta(days=30)
UPCOMING_WINDOW = timedelta(days=7)
TOP_CATEGORIES = 5
MAX_UPCOMING = 5
RECENT_TRANSACTIONS = 10
# Suggested card payment when only the balance is known
CARD_PAYMENT_RATIO = 0.1


def format_currency(amount: float, currency: str) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f} {currency}"


def _percent(part: float, whole: float) -> str:
    if not whole:
        return "n/a"
    return f"{part / whole * 100:.1f}%"


def _section(title: str, lines: list[str], empty: str) -> str:
    body = "\n".join(lines) if lines else f"- {empty}"
    return f"{title}:\n{body}"


def _upcoming_payments(
    data: FinancialData, now: datetime
) -> list[tuple[str, float, datetime]]:
    """Card payments due within a week plus future subscription charges, by date."""
    payments: list[tuple[str, float, datetime]] = []

    for card in data.credit_cards:
        due = card.next_payment_date
        if due is None or not (now < due <= now + UPCOMING_WINDOW):
            continue
        amount = card.current_balance * CARD_PAYMENT_RATIO if card.current_balance > 0 else 0
        payments.append((f"{card.name} ({card.bank})", amount, due))

    subscriptions = [
        t
        for t in data.transactions
        if t.is_subscription and t.next_payment_date and t.next_payment_date > now
    ]
    for t in subscriptions[:MAX_UPCOMING]:
        payments.append((t.title, t.amount, t.next_payment_date))

    return sorted(payments, key=lambda p: p[2])


def _card_line(card: CreditCard, currency: str) -> str:
    return (
        f"- {card.name} ({card.bank}): {format_currency(card.current_balance, currency)}"
        f" of {format_currency(card.credit_limit, currency)}"
        f" ({_percent(card.current_balance, card.credit_limit)} utilization)"
    )


def _objective_line(ob: Objective, currency: str) -> str:
    kind = "Debt" if ob.type == "debt" else "Savings"
    return (
        f"- {ob.title} ({kind}): {format_currency(ob.current_amount, currency)}"
        f" of {format_currency(ob.amount, currency)}"
        f" ({_percent(ob.current_amount, ob.amount)})"
    )


def _transaction_line(t: Transaction, currency: str) -> str:
    icon = "↓" if t.type == "income" else "↑"
    category = f" ({t.category_name})" if t.category_name else ""
    return (
        f"{t.timestamp:%d/%m/%Y} | {icon} {t.type}{category} - \"{t.title}\""
        f" | {format_currency(t.amount, currency)}"
    )


def build_financial_context(
    data: FinancialData, now: datetime | None = None, currency: str = "MXN"
) -> str:
    """
    Summarize the user's finances as plain text for the assistant's system prompt.

    Aggregates cover the last 30 days and skip excluded transactions. The
    recent-transactions section lists the first 10 transactions as given, which
    callers pass newest first.
    """
    now = now or datetime.now()
    window_start = now - SUMMARY_WINDOW

    recent = [
        t for t in data.transactions if t.timestamp >= window_start and not t.is_excluded
    ]
    income = sum(t.amount for t in recent if t.type == "income")
    expenses = sum(t.amount for t in recent if t.type == "expense")
    balance = income - expenses

    category_totals: dict[str, float] = defaultdict(float)
    for t in recent:
        if t.type == "expense":
            category_totals[t.category_name or "Uncategorized"] += t.amount
    top_categories = sorted(category_totals.items(), key=lambda c: c[1], reverse=True)[
        :TOP_CATEGORIES
    ]

    summary = "\n".join(
        [
            "FINANCIAL SUMMARY (last 30 days):",
            f"- Income: {format_currency(income, currency)}",
            f"- Expenses: {format_currency(expenses, currency)}",
            f"- Balance: {format_currency(balance, currency)}",
            f"- Net savings rate: {_percent(balance, income)}",
        ]
    )

    wallets = _section(
        "ACCOUNTS",
        [
            f"- {w.name}: {format_currency(w.net_balance, w.currency or currency)}"
            for w in data.wallets
        ],
        "None registered",
    )
    cards = _section(
        "CREDIT CARDS",
        [_card_line(c, currency) for c in data.credit_cards],
        "None registered",
    )
    objectives = _section(
        "ACTIVE OBJECTIVES",
        [_objective_line(o, currency) for o in data.objectives if not o.is_archived],
        "None registered",
    )
    categories = _section(
        f"TOP {TOP_CATEGORIES} EXPENSE CATEGORIES",
        [
            f"{i}. {name}: {format_currency(total, currency)} ({_percent(total, expenses)})"
            for i, (name, total) in enumerate(top_categories, 1)
        ],
        "No expenses recorded",
    )
    upcoming = _section(
        "UPCOMING PAYMENTS (next 7 days)",
        [
            f"- {name}: {format_currency(amount, currency)} on {due:%b %d}"
            for name, amount, due in _upcoming_payments(data, now)[:MAX_UPCOMING]
        ],
        "None scheduled",
    )
    latest = _section(
        f"LATEST {RECENT_TRANSACTIONS} TRANSACTIONS",
        [
            _transaction_line(t, currency)
            for t in data.transactions[:RECENT_TRANSACTIONS]
        ],
        "None recorded",
    )

    return "\n\n".join([summary, wallets, cards, objectives, categories, upcoming, latest])
