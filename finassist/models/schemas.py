import json
from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


# ── Directives embedded in assistant replies ─────────────────────────


class ChartDataPoint(BaseModel):
    # LLMs add renderer hints such as "frontColor"; keep them
    model_config = ConfigDict(extra="allow")

    value: float
    label: str
    color: str | None = None


class ChartDirective(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["bar", "pie", "line"]
    title: str | None = None
    data: list[ChartDataPoint]


class TableDirective(BaseModel):
    headers: list[str]
    rows: list[list[str]]

    @field_validator("headers", mode="before")
    @classmethod
    def _stringify_headers(cls, value):
        if isinstance(value, list):
            return [_cell_to_str(h) for h in value]
        return value

    @field_validator("rows", mode="before")
    @classmethod
    def _stringify_cells(cls, value):
        if isinstance(value, list):
            return [
                [_cell_to_str(c) for c in row] if isinstance(row, list) else row
                for row in value
            ]
        return value


class ActionDirective(BaseModel):
    model_config = ConfigDict(extra="allow")

    action_type: Literal["save_objective", "create_budget"]
    title: str | None = None
    amount: float | None = None


class ParseResult(BaseModel):
    charts: list[ChartDirective] = []
    tables: list[TableDirective] = []
    action_buttons: list[ActionDirective] = []

    @property
    def is_empty(self) -> bool:
        return not (self.charts or self.tables or self.action_buttons)


class ParsedMessage(BaseModel):
    content: str
    metadata: ParseResult
    raw: str

    @property
    def has_directives(self) -> bool:
        return not self.metadata.is_empty


def _cell_to_str(value) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ── Chat transcript ──────────────────────────────────────────────────


class ChatMessage(BaseModel):
    id: int | None = None
    conversation_id: str = "default"
    role: Literal["user", "assistant", "system"]
    content: str
    metadata: ParseResult | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    content: str
    metadata: ParseResult
    has_directives: bool
    valid: bool


class CreateMessageRequest(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str
    conversation_id: str = "default"


# ── Financial context ────────────────────────────────────────────────


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# Clients send ISO strings with or without an offset; compare in local time
LocalDatetime = Annotated[datetime, AfterValidator(_to_local_naive)]


class Transaction(BaseModel):
    title: str
    amount: float
    type: Literal["income", "expense", "transfer"]
    timestamp: LocalDatetime
    category_name: str | None = None
    is_excluded: bool = False
    is_subscription: bool = False
    subscription_frequency: Literal["weekly", "monthly", "yearly", "once"] | None = None
    next_payment_date: LocalDatetime | None = None


class Wallet(BaseModel):
    name: str
    net_balance: float = 0
    currency: str | None = None


class CreditCard(BaseModel):
    name: str
    bank: str
    current_balance: float = 0
    credit_limit: float = 0
    next_payment_date: LocalDatetime | None = None


class Objective(BaseModel):
    title: str
    type: Literal["savings", "debt"] = "savings"
    amount: float
    current_amount: float = 0
    is_archived: bool = False


class FinancialData(BaseModel):
    transactions: list[Transaction] = []
    wallets: list[Wallet] = []
    objectives: list[Objective] = []
    credit_cards: list[CreditCard] = []


class ContextResponse(BaseModel):
    summary: str
    system_prompt: str


class PlanRequest(BaseModel):
    transactions: list[Transaction]
    total_balance: float = 0
    # includes scheduled transactions the client did not send
    transaction_count: int | None = None


class PlanPromptResponse(BaseModel):
    prompt: str
    transaction_count: int
