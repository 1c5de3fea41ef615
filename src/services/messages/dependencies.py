from fastapi import Request
from src.infra.database import DatabaseManager
from src.services.messages.repository import MessageRepository
from src.services.messages.service import MessageService
from src.services.rides.dependencies import get_ride_repository


def get_message_service(request: Request) -> MessageService:
    return MessageService(MessageRepository(DatabaseManager()), get_ride_repository(request))
