from fastapi import APIRouter, Depends

from studx.config import get_settings
from studx.database.connection import mongo_db_dependency
from studx.repositories.conversation_repository import ConversationRepository
from studx.repositories.message_repository import MessageRepository
from studx.repositories.user_repository import UserRepository
from studx.schemas.message import (
    ConversationListResponse,
    DetailResponse,
    MessageListResponse,
    SendMessageRequest,
    SendMessageResponse,
    StartConversationRequest,
    StartConversationResponse,
)
from studx.services.chat_service import ChatService
from studx.utils.dependencies import get_current_user


router = APIRouter(prefix="/messages", tags=["messages"], dependencies=[Depends(get_current_user)])


def get_chat_service(db=Depends(mongo_db_dependency)) -> ChatService:
    msg_repo = MessageRepository(db)
    convo_repo = ConversationRepository(db)
    user_repo = UserRepository(db)
    return ChatService(msg_repo, convo_repo, user_repo, get_settings().display_zone)


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    conversations = await service.list_conversations(current_user["_id"])
    return {"conversations": conversations}


@router.post("/conversations", response_model=StartConversationResponse)
async def start_conversation(body: StartConversationRequest, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    conversation_id, created = await service.start_conversation(
        current_user["_id"],
        body.other_user_id,
        other_user_name=body.other_user_name,
        other_user_email=body.other_user_email,
    )
    message = "Conversation created successfully" if created else "Conversation already exists"
    return StartConversationResponse(conversation_id=conversation_id, message=message)


@router.get("/conversations/{conversation_id}", response_model=MessageListResponse)
async def get_messages(conversation_id: str, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    # listing doubles as "mark as read" for the caller
    messages = await service.get_messages(current_user["_id"], conversation_id)
    return {"messages": messages}


@router.post("/conversations/{conversation_id}", response_model=SendMessageResponse)
async def send_message(conversation_id: str, body: SendMessageRequest, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    message = await service.send_message(current_user, conversation_id, body.text)
    return {"message": message, "success": True}


@router.delete("/conversations/{conversation_id}", response_model=DetailResponse)
async def delete_conversation(conversation_id: str, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    await service.delete_conversation(current_user["_id"], conversation_id)
    return {"message": "Conversation deleted successfully"}
