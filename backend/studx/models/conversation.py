from datetime import datetime
from typing import List, Optional, TypedDict


class ParticipantDetails(TypedDict, total=False):
    user_id: str
    name: str
    email: str
    branch: str


class LastMessage(TypedDict):
    text: str
    sender_id: str
    timestamp: datetime


class ConversationDocument(TypedDict, total=False):
    _id: str
    # sorted pair of user ids
    participants: List[str]
    pair_key: str
    # snapshot taken at creation, never refreshed
    participant_details: List[ParticipantDetails]
    last_message: Optional[LastMessage]
    # per-user unread counters (user_id -> count)
    unread_counts: dict[str, int]
    created_at: datetime
