import pytest

from finassist.chat.parser import MessageParser
from finassist.db.repository import ChatRepository


class RecordingLogger:
    """Collects formatted log lines instead of emitting them."""

    def __init__(self):
        self.debugs: list[str] = []
        self.warnings: list[str] = []

    def debug(self, message: str, *args) -> None:
        self.debugs.append(message.format(*args))

    def warning(self, message: str, *args) -> None:
        self.warnings.append(message.format(*args))


@pytest.fixture
def log() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def parser(log: RecordingLogger) -> MessageParser:
    return MessageParser(log=log)


@pytest.fixture
def repo(tmp_path) -> ChatRepository:
    repository = ChatRepository(str(tmp_path / "chat_history.json"))
    yield repository
    repository.db.close()
