from functools import lru_cache

from finassist.chat.parser import MessageParser
from finassist.config import get_settings
from finassist.db.repository import ChatRepository


@lru_cache
def get_repo() -> ChatRepository:
    return ChatRepository(get_settings().db_path)


@lru_cache
def get_parser() -> MessageParser:
    return MessageParser()
