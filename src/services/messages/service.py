from typing import List
from uuid import UUID

from src.common.exceptions import NotFoundError
from src.services.messages.repository import MessageRepository
from src.services.rides.repository import RideRepository
from src.services.rides.service import brief_from_row
from src.shared.models.message_dto import MessageDTO


def message_from_row(data: dict) -> MessageDTO:
    return MessageDTO(
        id=data["id"],
        ride_id=data["ride_id"],
        sender_id=data["sender_id"],
        message=data["message"],
        created_at=data["created_at"],
        sender=brief_from_row(data, "sender"),
    )


class MessageService:
    def __init__(self, repository: MessageRepository, ride_repository: RideRepository):
        self.repository = repository
        self.ride_repository = ride_repository

    async def _require_ride(self, ride_id: UUID) -> None:
        if await self.ride_repository.get_ride_status(ride_id) is None:
            raise NotFoundError("Ride not found")

    async def send(self, ride_id: UUID, sender_id: UUID, text: str) -> MessageDTO:
        await self._require_ride(ride_id)
        message_id = await self.repository.create_message(ride_id, sender_id, text)
        return message_from_row(await self.repository.get_message(message_id))

    async def list(self, ride_id: UUID) -> List[MessageDTO]:
        """Messages of a ride, oldest first."""
        await self._require_ride(ride_id)
        rows = await self.repository.get_messages_by_ride(ride_id)
        return [message_from_row(row) for row in rows]
