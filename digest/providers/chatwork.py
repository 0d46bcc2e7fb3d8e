"""Chatwork v2 room messages."""

import requests

from ..config import CHATWORK_API_URL, REQUEST_TIMEOUT
from ..errors import ConfigError, ParseError, TransportError
from ..retry import retry_transport
from .base import ChatClient


class ChatworkClient(ChatClient):
    def __init__(self, token: str, timeout: float = REQUEST_TIMEOUT, session: requests.Session | None = None):
        if not token:
            raise ConfigError("CHATWORK_API_TOKEN is not set")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _call(self, method: str, path: str, data: dict | None = None) -> dict:
        try:
            r = self.session.request(
                method,
                f"{CHATWORK_API_URL}{path}",
                data=data,
                headers={"X-ChatWorkToken": self.token},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Chatwork {method} {path} failed: {e}") from e
        if r.status_code >= 400:
            raise TransportError(f"Chatwork {r.status_code}: {r.text[:200]}", r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise ParseError(f"Chatwork returned non-JSON body: {r.text[:200]}") from e

    @retry_transport(max_retries=2, base_delay=2.0)
    def post_message(self, room_id: str, body: str) -> str:
        data = self._call("POST", f"/rooms/{room_id}/messages", data={"body": body})
        message_id = data.get("message_id") if isinstance(data, dict) else None
        if not message_id:
            raise ParseError(f"Chatwork response without message_id: {data!r}")
        return str(message_id)

    def get_message(self, room_id: str, message_id: str) -> str:
        data = self._call("GET", f"/rooms/{room_id}/messages/{message_id}")
        if not isinstance(data, dict) or "body" not in data:
            raise ParseError(f"Chatwork message without body: {data!r}")
        return str(data["body"])
