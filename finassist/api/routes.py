from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from finassist.chat.context import build_financial_context
from finassist.chat.parser import MessageParser
from finassist.chat.plan import MIN_PLAN_TRANSACTIONS, build_plan_prompt
from finassist.config import get_settings
from finassist.db.repository import ChatRepository
from finassist.deps import get_parser, get_repo
from finassist.llm.prompts import build_system_prompt
from finassist.models.schemas import (
    ChatMessage,
    ContextResponse,
    CreateMessageRequest,
    FinancialData,
    ParseRequest,
    ParseResponse,
    PlanPromptResponse,
    PlanRequest,
)

router = APIRouter()


@router.post("/messages/parse", response_model=ParseResponse)
def parse_message(request: ParseRequest, parser: MessageParser = Depends(get_parser)):
    parsed = parser.parse_message(request.text)
    return ParseResponse(
        content=parsed.content,
        metadata=parsed.metadata,
        has_directives=parsed.has_directives,
        valid=parser.validate_marker_json(request.text),
    )


@router.post("/messages", response_model=ChatMessage)
def create_message(
    request: CreateMessageRequest,
    repo: ChatRepository = Depends(get_repo),
    parser: MessageParser = Depends(get_parser),
):
    message = ChatMessage(
        conversation_id=request.conversation_id,
        role=request.role,
        content=request.content,
    )
    if request.role == "assistant":
        parsed = parser.parse_message(request.content)
        message.content = parsed.content
        message.metadata = parsed.metadata

    created = repo.add(message)
    logger.info(
        "Stored {} message #{} in conversation {}",
        created.role,
        created.id,
        created.conversation_id,
    )
    return created


@router.get("/messages", response_model=list[ChatMessage])
def list_messages(
    conversation_id: str | None = None,
    limit: int | None = None,
    repo: ChatRepository = Depends(get_repo),
):
    limit = limit if limit is not None else get_settings().history_limit
    return repo.recent(limit, conversation_id=conversation_id)


@router.get("/messages/{message_id}", response_model=ChatMessage)
def get_message(message_id: int, repo: ChatRepository = Depends(get_repo)):
    message = repo.get(message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.delete("/messages/{message_id}")
def delete_message(message_id: int, repo: ChatRepository = Depends(get_repo)):
    if not repo.delete(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    logger.info("Deleted message #{}", message_id)
    return {"detail": "Message deleted"}


@router.delete("/messages")
def clear_messages(
    conversation_id: str | None = None, repo: ChatRepository = Depends(get_repo)
):
    deleted = repo.clear(conversation_id)
    logger.info("Cleared {} message(s)", deleted)
    return {"deleted": deleted}


@router.post("/context", response_model=ContextResponse)
def build_context(data: FinancialData):
    summary = build_financial_context(data, currency=get_settings().default_currency)
    return ContextResponse(summary=summary, system_prompt=build_system_prompt(summary))


@router.post("/plan/prompt", response_model=PlanPromptResponse)
def build_plan(request: PlanRequest):
    if len(request.transactions) < MIN_PLAN_TRANSACTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"At least {MIN_PLAN_TRANSACTIONS} transactions are required to build a plan",
        )

    count = (
        request.transaction_count
        if request.transaction_count is not None
        else len(request.transactions)
    )
    prompt = build_plan_prompt(
        request.transactions,
        total_balance=request.total_balance,
        transaction_count=count,
        currency=get_settings().default_currency,
    )
    logger.info("Built plan prompt from {} transactions", len(request.transactions))
    return PlanPromptResponse(prompt=prompt, transaction_count=count)
