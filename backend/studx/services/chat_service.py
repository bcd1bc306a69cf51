import logging
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional, Tuple

from studx.repositories.conversation_repository import ConversationRepository
from studx.repositories.message_repository import MessageRepository
from studx.repositories.user_repository import UserRepository
from studx.schemas.message import ConversationSummary, MessageView
from studx.utils.errors import InvalidArgumentError, NotFoundError
from studx.utils.formatting import relative_time, time_of_day


logger = logging.getLogger(__name__)

NO_MESSAGES_PREVIEW = "No messages yet"
UNKNOWN_USER = "Unknown User"


class ChatService:
    """Conversation resolution, the message log and unread bookkeeping.

    Every operation takes the authenticated caller; conversations the caller
    does not participate in are reported as missing.
    """

    def __init__(
        self,
        message_repo: MessageRepository,
        conversation_repo: ConversationRepository,
        user_repo: UserRepository,
        display_zone: Optional[tzinfo] = None,
    ) -> None:
        self._message_repo = message_repo
        self._conversation_repo = conversation_repo
        self._user_repo = user_repo
        self._display_zone = display_zone

    async def start_conversation(
        self,
        caller_id: str,
        other_user_id: Optional[str],
        other_user_name: Optional[str] = None,
        other_user_email: Optional[str] = None,
    ) -> Tuple[str, bool]:
        """Find or create the conversation between the caller and another user.

        Returns ``(conversation_id, created)``. Repeated calls for the same pair,
        from either side, return the same id.
        """
        if not other_user_id or not str(other_user_id).strip():
            raise InvalidArgumentError("Other user ID required")
        caller_id = str(caller_id)
        other_user_id = str(other_user_id).strip()
        if other_user_id == caller_id:
            raise InvalidArgumentError("Cannot start a conversation with yourself")

        caller = await self._user_repo.get_user_by_id(caller_id)
        if not caller:
            raise NotFoundError("User not found")
        other = await self._user_repo.get_user_by_id(other_user_id)
        if not other:
            raise NotFoundError("Other user not found")

        existing = await self._conversation_repo.find_between(caller_id, other_user_id)
        if existing:
            return str(existing["_id"]), False

        caller_details = {
            "user_id": caller_id,
            "name": caller.get("full_name") or "Unknown",
            "email": caller.get("email") or "",
            "branch": caller.get("branch") or "",
        }
        other_details = {
            "user_id": other_user_id,
            "name": other_user_name or other.get("full_name") or "Unknown",
            "email": other_user_email or other.get("email") or "",
            "branch": other.get("branch") or "",
        }
        convo = await self._conversation_repo.create_one_to_one(caller_details, other_details)
        logger.info("Conversation %s ready between %s and %s", convo["_id"], caller_id, other_user_id)
        return str(convo["_id"]), True

    async def list_conversations(self, caller_id: str, now: Optional[datetime] = None) -> List[ConversationSummary]:
        caller_id = str(caller_id)
        conversations = await self._conversation_repo.list_for_user(caller_id)
        return [self._summarize(convo, caller_id, now) for convo in conversations]

    def _summarize(self, convo: Dict[str, Any], caller_id: str, now: Optional[datetime]) -> ConversationSummary:
        other = next(
            (p for p in convo.get("participant_details") or [] if str(p.get("user_id")) != caller_id),
            None,
        )
        if other is None:
            logger.warning("Conversation %s has no counterpart details for %s", convo.get("_id"), caller_id)
            other = {}
        other_id = other.get("user_id") or next(
            (p for p in convo.get("participants") or [] if p != caller_id), None
        )
        last = convo.get("last_message") or {}
        unread = (convo.get("unread_counts") or {}).get(caller_id, 0)
        return ConversationSummary(
            id=str(convo["_id"]),
            other_user_id=str(other_id) if other_id else None,
            name=other.get("name") or UNKNOWN_USER,
            email=other.get("email") or "",
            branch=other.get("branch") or "",
            last_message=last.get("text") or NO_MESSAGES_PREVIEW,
            time=relative_time(last["timestamp"], now, self._display_zone) if last.get("timestamp") else "Just now",
            unread_count=unread,
        )

    async def get_messages(self, caller_id: str, conversation_id: str) -> List[MessageView]:
        """Return the conversation's messages oldest first and mark the other side's as read.

        Read flags in the returned views are as stored before this call marked them.
        """
        caller_id = str(caller_id)
        convo = await self._conversation_repo.find_for_participant(conversation_id, caller_id)
        if not convo:
            raise NotFoundError("Conversation not found")

        messages = await self._message_repo.list_by_conversation(convo["_id"])
        await self._message_repo.mark_read_for_reader(convo["_id"], caller_id)
        await self._conversation_repo.reset_unread(convo["_id"], caller_id)
        return [self._view(m, caller_id) for m in messages]

    async def send_message(self, caller: Dict[str, Any], conversation_id: str, text: Optional[str]) -> MessageView:
        text = (text or "").strip()
        if not text:
            raise InvalidArgumentError("Message text required")
        caller_id = str(caller["_id"])
        convo = await self._conversation_repo.find_for_participant(conversation_id, caller_id)
        if not convo:
            raise NotFoundError("Conversation not found")

        saved = await self._message_repo.save_message(
            conversation_id=convo["_id"],
            sender_id=caller_id,
            sender_name=caller.get("full_name") or "Unknown",
            text=text,
        )
        receiver_id = next((p for p in convo["participants"] if p != caller_id), None)
        if receiver_id is not None:
            await self._conversation_repo.update_on_new_message(
                convo["_id"], text, caller_id, receiver_id, saved["created_at"]
            )
        return self._view(saved, caller_id)

    async def delete_conversation(self, caller_id: str, conversation_id: str) -> None:
        caller_id = str(caller_id)
        convo = await self._conversation_repo.find_for_participant(conversation_id, caller_id)
        if not convo:
            raise NotFoundError("Conversation not found")
        # messages first: a failed conversation delete leaves nothing orphaned
        removed = await self._message_repo.delete_by_conversation(convo["_id"])
        await self._conversation_repo.delete(convo["_id"])
        logger.info("Conversation %s deleted by %s (%d messages)", convo["_id"], caller_id, removed)

    def _view(self, message: Dict[str, Any], caller_id: str) -> MessageView:
        return MessageView(
            id=str(message["_id"]),
            sender=message.get("sender_name") or "Unknown",
            text=message["text"],
            timestamp=time_of_day(message["created_at"], self._display_zone),
            is_me=str(message["sender_id"]) == caller_id,
            is_read=bool(message.get("is_read", False)),
        )
