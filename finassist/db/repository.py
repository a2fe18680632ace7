from tinydb import Query, TinyDB

from finassist.models.schemas import ChatMessage


class ChatRepository:
    def __init__(self, db_path: str = "chat_history.json"):
        self.db = TinyDB(db_path)
        self.table = self.db.table("messages")

    def _to_message(self, doc) -> ChatMessage:
        return ChatMessage(id=doc.doc_id, **doc)

    def add(self, message: ChatMessage) -> ChatMessage:
        data = message.model_dump(mode="json")
        data.pop("id", None)
        doc_id = self.table.insert(data)
        message.id = doc_id
        return message

    def get(self, id: int) -> ChatMessage | None:
        doc = self.table.get(doc_id=id)
        if doc is None:
            return None
        return self._to_message(doc)

    def get_all(self, conversation_id: str | None = None) -> list[ChatMessage]:
        if conversation_id:
            Msg = Query()
            docs = self.table.search(Msg.conversation_id == conversation_id)
        else:
            docs = self.table.all()
        # doc ids grow with insertion order
        docs = sorted(docs, key=lambda doc: doc.doc_id)
        return [self._to_message(doc) for doc in docs]

    def recent(self, limit: int, conversation_id: str | None = None) -> list[ChatMessage]:
        """Last ``limit`` messages, oldest first."""
        if limit <= 0:
            return []
        return self.get_all(conversation_id)[-limit:]

    def delete(self, id: int) -> bool:
        doc = self.table.get(doc_id=id)
        if doc is None:
            return False
        self.table.remove(doc_ids=[id])
        return True

    def clear(self, conversation_id: str | None = None) -> int:
        if conversation_id:
            Msg = Query()
            removed = self.table.remove(Msg.conversation_id == conversation_id)
            return len(removed)
        count = len(self.table)
        self.table.truncate()
        return count
