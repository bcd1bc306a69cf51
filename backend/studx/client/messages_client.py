import logging
from typing import Any, Dict, List, Optional

import httpx


logger = logging.getLogger(__name__)


class MessagesClientError(Exception):

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MessagesClient:
    """Thin async wrapper over the ``/messages`` REST endpoints."""

    def __init__(self, token: str, base_url: str = "http://localhost:8000/api", http: Optional[httpx.AsyncClient] = None) -> None:
        # an injected client carries its own base_url
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url)
        self._headers = {"Authorization": f"Bearer {token}"}

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "MessagesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self._http.request(method, path, json=json, headers=self._headers)
        except httpx.HTTPError as exc:
            raise MessagesClientError(f"Request failed: {exc}") from exc
        try:
            data = response.json()
        except ValueError:
            data = None
        if response.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            raise MessagesClientError(message or "Server error", status_code=response.status_code)
        if not isinstance(data, dict):
            raise MessagesClientError("Invalid response from server", status_code=response.status_code)
        return data

    async def list_conversations(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/messages/conversations")
        return data.get("conversations", [])

    async def start_conversation(self, other_user_id: str, other_user_name: Optional[str] = None, other_user_email: Optional[str] = None) -> str:
        """Open (or reuse) the chat with a seller or founder and return its id."""
        data = await self._request(
            "POST",
            "/messages/conversations",
            json={
                "otherUserId": other_user_id,
                "otherUserName": other_user_name,
                "otherUserEmail": other_user_email or "",
            },
        )
        return data["conversationId"]

    async def find_conversation_with(self, other_user_id: str) -> Optional[str]:
        try:
            conversations = await self.list_conversations()
        except MessagesClientError as exc:
            logger.warning("Could not check existing conversations: %s", exc.message)
            return None
        for convo in conversations:
            if convo.get("otherUserId") == other_user_id:
                return convo["id"]
        return None

    async def get_messages(self, conversation_id: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/messages/conversations/{conversation_id}")
        return data.get("messages", [])

    async def send_message(self, conversation_id: str, text: str) -> Dict[str, Any]:
        data = await self._request("POST", f"/messages/conversations/{conversation_id}", json={"text": text})
        return data["message"]

    async def delete_conversation(self, conversation_id: str) -> None:
        await self._request("DELETE", f"/messages/conversations/{conversation_id}")
