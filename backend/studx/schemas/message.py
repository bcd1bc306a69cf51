from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):

    model_config = ConfigDict(populate_by_name=True)


class StartConversationRequest(CamelModel):

    other_user_id: Optional[str] = Field(default=None, alias="otherUserId")
    other_user_name: Optional[str] = Field(default=None, alias="otherUserName")
    other_user_email: Optional[str] = Field(default=None, alias="otherUserEmail")


class StartConversationResponse(CamelModel):

    conversation_id: str = Field(alias="conversationId")
    message: str


class SendMessageRequest(CamelModel):

    text: Optional[str] = None


class ConversationSummary(CamelModel):

    id: str
    other_user_id: Optional[str] = Field(default=None, alias="otherUserId")
    name: str
    email: str = ""
    branch: str = ""
    last_message: str = Field(alias="lastMessage")
    time: str
    unread_count: int = Field(default=0, alias="unreadCount")


class ConversationListResponse(BaseModel):

    conversations: List[ConversationSummary]


class MessageView(CamelModel):

    id: str
    sender: str
    text: str
    timestamp: str
    is_me: bool = Field(alias="isMe")
    is_read: bool = Field(alias="isRead")


class MessageListResponse(BaseModel):

    messages: List[MessageView]


class SendMessageResponse(BaseModel):

    message: MessageView
    success: bool = True


class DetailResponse(BaseModel):

    message: str
