"""Polling view-model for the messenger screen.

Two timer loops keep the screen fresh without any push transport: the
conversation list is re-fetched every five seconds for as long as the poller
runs, and the open conversation's messages every three seconds while it stays
selected. Fetching the open conversation also marks it read on the server, so
an open conversation keeps its unread badge at zero.

Foreground loads (first load, selecting a conversation, sending, deleting)
drive ``loading`` and ``error``; background refreshes never touch either and
never clear what is already shown. Failures of send and delete are re-raised so
the caller can alert the user.
"""

import asyncio
import contextlib
import logging
from typing import Any, Callable, Dict, List, Optional

from studx.client.messages_client import MessagesClient, MessagesClientError


logger = logging.getLogger(__name__)

CONVERSATION_POLL_SECONDS = 5.0
MESSAGE_POLL_SECONDS = 3.0


class MessengerPoller:

    def __init__(
        self,
        client: MessagesClient,
        conversation_interval: float = CONVERSATION_POLL_SECONDS,
        message_interval: float = MESSAGE_POLL_SECONDS,
        on_change: Optional[Callable[["MessengerPoller"], None]] = None,
    ) -> None:
        self._client = client
        self._conversation_interval = conversation_interval
        self._message_interval = message_interval
        self._on_change = on_change

        self.conversations: List[Dict[str, Any]] = []
        self.messages: List[Dict[str, Any]] = []
        self.active_conversation_id: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None

        self._conversation_task: Optional[asyncio.Task] = None
        self._message_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "MessengerPoller":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def running_tasks(self) -> List[asyncio.Task]:
        return [t for t in (self._conversation_task, self._message_task) if t is not None and not t.done()]

    async def start(self) -> None:
        try:
            await self.refresh_conversations()
        except MessagesClientError:
            # error is already on display; keep polling so the list can recover
            pass
        if self._conversation_task is None:
            self._conversation_task = asyncio.create_task(
                self._poll(self._conversation_interval, self.refresh_conversations)
            )

    async def close(self) -> None:
        await self._cancel(self._message_task)
        await self._cancel(self._conversation_task)
        self._message_task = None
        self._conversation_task = None

    async def select_conversation(self, conversation_id: Optional[str]) -> None:
        await self._cancel(self._message_task)
        self._message_task = None
        self.active_conversation_id = conversation_id
        self.messages = []
        if conversation_id is None:
            self._notify()
            return
        try:
            await self.refresh_messages()
        except MessagesClientError:
            pass
        # the list's badge for this conversation is now stale
        await self.refresh_conversations(background=True)
        self._message_task = asyncio.create_task(self._poll(self._message_interval, self.refresh_messages))

    async def refresh_conversations(self, background: bool = False) -> None:
        if not background:
            self._begin()
        try:
            conversations = await self._client.list_conversations()
        except MessagesClientError as exc:
            self._fail(exc, background, "conversations")
            return
        self.conversations = conversations
        self._finish(background)

    async def refresh_messages(self, background: bool = False) -> None:
        conversation_id = self.active_conversation_id
        if conversation_id is None:
            return
        if not background:
            self._begin()
        try:
            messages = await self._client.get_messages(conversation_id)
        except MessagesClientError as exc:
            self._fail(exc, background, f"messages of {conversation_id}")
            return
        if conversation_id != self.active_conversation_id:
            # selection changed while the request was in flight
            if not background:
                self.loading = False
            return
        self.messages = messages
        self._finish(background)

    async def start_conversation(self, other_user_id: str, other_user_name: Optional[str] = None, other_user_email: Optional[str] = None) -> str:
        """The "Chat seller" / "Chat founder" action: open the pair's conversation and select it."""
        try:
            conversation_id = await self._client.start_conversation(other_user_id, other_user_name, other_user_email)
        except MessagesClientError as exc:
            self.error = exc.message
            self._notify()
            raise
        await self.refresh_conversations(background=True)
        await self.select_conversation(conversation_id)
        return conversation_id

    async def send_message(self, text: str) -> Optional[Dict[str, Any]]:
        conversation_id = self.active_conversation_id
        if conversation_id is None or not text or not text.strip():
            return None
        try:
            message = await self._client.send_message(conversation_id, text)
        except MessagesClientError as exc:
            self.error = exc.message
            self._notify()
            raise
        if conversation_id == self.active_conversation_id:
            self.messages = self.messages + [message]
            self._notify()
        await self.refresh_conversations(background=True)
        return message

    async def delete_conversation(self, conversation_id: str) -> None:
        try:
            await self._client.delete_conversation(conversation_id)
        except MessagesClientError as exc:
            self.error = exc.message
            self._notify()
            raise
        self.conversations = [c for c in self.conversations if c.get("id") != conversation_id]
        if conversation_id == self.active_conversation_id:
            await self.select_conversation(None)
        else:
            self._notify()

    async def _poll(self, interval: float, refresh: Callable[..., Any]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await refresh(background=True)
            except Exception:
                # a failed tick must not end the loop; the next tick retries
                logger.exception("Polling %s failed", refresh.__name__)

    async def _cancel(self, task: Optional[asyncio.Task]) -> None:
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _begin(self) -> None:
        self.loading = True
        self.error = None
        self._notify()

    def _finish(self, background: bool) -> None:
        if not background:
            self.loading = False
        self._notify()

    def _fail(self, exc: MessagesClientError, background: bool, what: str) -> None:
        if background:
            logger.warning("Background refresh of %s failed: %s", what, exc.message)
            return
        self.loading = False
        self.error = exc.message
        self._notify()
        raise exc

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
