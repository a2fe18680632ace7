from collections import defaultdict

from finassist.chat.context import format_currency
from finassist.llm.prompts import PLAN_PROMPT
from finassist.models.schemas import Transaction

MIN_PLAN_TRANSACTIONS = 10
MAX_LISTED_TRANSACTIONS = 50
# Monthly equivalent of a single charge; anything else counts once a month
FREQUENCY_MULTIPLIERS = {"weekly": 4, "yearly": 1 / 12}


def is_debt(t: Transaction) -> bool:
    """Single-payment subscriptions are debts with a due date."""
    return t.is_subscription and t.subscription_frequency in (None, "once")


def is_recurring(t: Transaction) -> bool:
    return t.is_subscription and not is_debt(t)


def _label(t: Transaction) -> str:
    return t.title or t.category_name or "Uncategorized"


def _category_lines(transactions: list[Transaction], currency: str) -> list[str]:
    amounts: dict[str, list[float]] = defaultdict(list)
    for t in transactions:
        if t.type == "expense":
            amounts[t.category_name or "Uncategorized"].append(t.amount)

    stats = sorted(amounts.items(), key=lambda c: sum(c[1]), reverse=True)
    return [
        f"- {category}: {format_currency(sum(values), currency)}"
        f" ({len(values)} transactions, average {format_currency(sum(values) / len(values), currency)},"
        f" range {format_currency(min(values), currency)} - {format_currency(max(values), currency)})"
        for category, values in stats
    ]


def monthly_subscription_cost(transactions: list[Transaction]) -> float:
    return sum(
        t.amount * FREQUENCY_MULTIPLIERS.get(t.subscription_frequency, 1)
        for t in transactions
        if is_recurring(t)
    )


def _subscription_section(transactions: list[Transaction], currency: str) -> str | None:
    subscriptions = [t for t in transactions if is_recurring(t)]
    if not subscriptions:
        return None

    # first charge seen sets the amount and frequency shown
    summary: dict[str, dict] = {}
    for t in subscriptions:
        entry = summary.setdefault(
            _label(t), {"amount": t.amount, "frequency": t.subscription_frequency, "count": 0}
        )
        entry["count"] += 1

    lines = [f"ACTIVE SUBSCRIPTIONS ({len(subscriptions)} total):"]
    lines += [
        f"- {name}: {format_currency(s['amount'], currency)} {s['frequency']}"
        f" ({s['count']} payments recorded)"
        for name, s in summary.items()
    ]
    lines.append(
        "Estimated monthly subscription cost: "
        f"{format_currency(monthly_subscription_cost(transactions), currency)}"
    )
    return "\n".join(lines)


def _debt_section(transactions: list[Transaction], currency: str) -> str | None:
    debts = [t for t in transactions if is_debt(t)]
    if not debts:
        return None

    summary: dict[str, dict] = {}
    for t in debts:
        entry = summary.setdefault(
            _label(t), {"total": 0.0, "count": 0, "due": t.next_payment_date}
        )
        entry["total"] += t.amount
        entry["count"] += 1

    lines = [f"DEBTS / ONE-OFF PAYMENTS ({len(debts)} total):"]
    for name, d in summary.items():
        due = f"{d['due']:%Y-%m-%d}" if d["due"] else "No date"
        lines.append(
            f"- {name}: {format_currency(d['total'], currency)} total"
            f" ({d['count']} payments) - Due: {due}"
        )
    lines.append(
        "Total in debts / one-off payments: "
        f"{format_currency(sum(t.amount for t in debts), currency)}"
    )
    return "\n".join(lines)


def _transaction_line(t: Transaction, currency: str) -> str:
    flags = []
    if is_recurring(t):
        flags.append("S")
    if is_debt(t):
        flags.append("D")
    if t.is_excluded:
        flags.append("X")

    kind = "Income" if t.type == "income" else "Expense"
    title = f' - "{t.title}"' if t.title else ""
    line = (
        f"{t.timestamp:%Y-%m-%d} | {kind} | {t.category_name or 'Uncategorized'}{title}"
        f" | {format_currency(t.amount, currency)}"
    )
    if flags:
        line += f" [{','.join(flags)}]"
    return line


def build_plan_prompt(
    transactions: list[Transaction],
    total_balance: float = 0,
    transaction_count: int | None = None,
    currency: str = "MXN",
) -> str:
    """
    Build the prompt asking the assistant for a personalized financial plan.

    Income, expenses and savings use only transactions included in the balance.
    Category statistics, subscriptions and debts use every transaction, so
    scheduled commitments show up in the plan. ``transactions`` is newest first.
    """
    if len(transactions) < MIN_PLAN_TRANSACTIONS:
        raise ValueError(
            f"at least {MIN_PLAN_TRANSACTIONS} transactions are required, got {len(transactions)}"
        )

    count = transaction_count if transaction_count is not None else len(transactions)
    included = [t for t in transactions if not t.is_excluded]
    income = sum(t.amount for t in included if t.type == "income")
    expenses = sum(t.amount for t in included if t.type == "expense")
    savings = income - expenses
    rate = savings / income * 100 if income > 0 else 0

    overview = "\n".join(
        [
            "OVERVIEW:",
            f"- Total transactions: {count} ({len(included)} included in balance,"
            f" {count - len(included)} pending/scheduled)",
            f"- Total income: {format_currency(income, currency)}",
            f"- Total expenses: {format_currency(expenses, currency)}",
            f"- Current balance: {format_currency(total_balance, currency)}",
            f"- Net savings: {format_currency(savings, currency)} ({rate:.1f}%)",
        ]
    )
    categories = "CATEGORY ANALYSIS:\n" + "\n".join(_category_lines(transactions, currency))

    listed = transactions[:MAX_LISTED_TRANSACTIONS]
    recent = f"RECENT TRANSACTIONS (last {len(listed)}):\n" + "\n".join(
        _transaction_line(t, currency) for t in listed
    )

    sections = [
        overview,
        categories,
        _subscription_section(transactions, currency),
        _debt_section(transactions, currency),
        recent,
    ]
    analysis = "\n\n".join(s for s in sections if s)
    return PLAN_PROMPT.format(analysis=analysis)
