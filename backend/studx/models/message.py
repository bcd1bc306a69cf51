from datetime import datetime
from typing import TypedDict


class MessageDocument(TypedDict, total=False):
    _id: str
    conversation_id: str
    sender_id: str
    sender_name: str
    text: str
    created_at: datetime
    # false -> true only, set when the recipient opens the conversation
    is_read: bool
