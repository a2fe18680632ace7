from finassist.chat.parser import MessageParser
from finassist.db.repository import ChatRepository
from finassist.models.schemas import ChatMessage

REPLY = (
    "Así van tus gastos: "
    '[CHART:BAR:{"title":"Mes","data":[{"value":5000,"label":"Enero","frontColor":"#7952FC"}]}]'
    ' [ACTION:CREATE_BUDGET:{"title":"Comida","amount":4000}]'
)


def _message(content: str, role: str = "user", conversation_id: str = "default"):
    return ChatMessage(role=role, content=content, conversation_id=conversation_id)


class TestChatRepository:
    def test_add_assigns_id_and_get_returns_message(self, repo: ChatRepository) -> None:
        created = repo.add(_message("Hola"))

        assert created.id is not None
        fetched = repo.get(created.id)
        assert fetched is not None
        assert fetched.content == "Hola"
        assert fetched.role == "user"
        assert fetched.metadata is None

    def test_get_missing_returns_none(self, repo: ChatRepository) -> None:
        assert repo.get(42) is None

    def test_assistant_metadata_round_trip(
        self, repo: ChatRepository, parser: MessageParser
    ) -> None:
        parsed = parser.parse_message(REPLY)
        created = repo.add(
            ChatMessage(role="assistant", content=parsed.content, metadata=parsed.metadata)
        )

        fetched = repo.get(created.id)

        assert fetched.content == "Así van tus gastos:"
        assert fetched.metadata.charts[0].type == "bar"
        assert fetched.metadata.charts[0].data[0].value == 5000
        assert fetched.metadata.charts[0].data[0].model_extra == {"frontColor": "#7952FC"}
        assert fetched.metadata.action_buttons[0].action_type == "create_budget"
        assert fetched.metadata.action_buttons[0].amount == 4000

    def test_get_all_filters_by_conversation_in_order(self, repo: ChatRepository) -> None:
        repo.add(_message("uno", conversation_id="a"))
        repo.add(_message("dos", conversation_id="b"))
        repo.add(_message("tres", conversation_id="a"))

        assert [m.content for m in repo.get_all("a")] == ["uno", "tres"]
        assert [m.content for m in repo.get_all()] == ["uno", "dos", "tres"]

    def test_recent_returns_last_messages_oldest_first(self, repo: ChatRepository) -> None:
        for i in range(5):
            repo.add(_message(f"m{i}"))

        assert [m.content for m in repo.recent(2)] == ["m3", "m4"]
        assert repo.recent(0) == []

    def test_delete(self, repo: ChatRepository) -> None:
        created = repo.add(_message("borrar"))

        assert repo.delete(created.id) is True
        assert repo.get(created.id) is None
        assert repo.delete(created.id) is False

    def test_clear_one_conversation(self, repo: ChatRepository) -> None:
        repo.add(_message("uno", conversation_id="a"))
        repo.add(_message("dos", conversation_id="b"))

        assert repo.clear("a") == 1
        assert [m.content for m in repo.get_all()] == ["dos"]

    def test_clear_everything(self, repo: ChatRepository) -> None:
        repo.add(_message("uno"))
        repo.add(_message("dos"))

        assert repo.clear() == 2
        assert repo.get_all() == []
