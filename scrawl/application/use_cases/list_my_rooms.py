"""ListMyRoomsUseCase - 列出身份所属的房间（新的在前，附带成员数）"""

from scrawl.domain.entities.room import Room
from scrawl.domain.ports.durable_store import DurableStore


class ListMyRoomsUseCase:
    def __init__(self, store: DurableStore):
        self.store = store

    def execute(self, user_id: str) -> list[Room]:
        return self.store.list_rooms_for_user(user_id)
