"""Supabase (PostgREST) storage for rooms, interests, history and saved articles.

Tables:
  user(room_id)
  field(room_id, field_name, priority)
  article_history(room_id, article_url)
  reserve_article(room_id, content)
"""

import requests

from ..config import REQUEST_TIMEOUT
from ..errors import ConfigError, ParseError, TransportError
from ..log import get_logger
from ..models import Interest, Room
from .base import HistoryStore, InterestStore, RoomStore, SavedArticleStore


class SupabaseStore(RoomStore, InterestStore, HistoryStore, SavedArticleStore):
    def __init__(self, url: str, key: str, timeout: float = REQUEST_TIMEOUT,
                 session: requests.Session | None = None):
        if not url or not key:
            raise ConfigError("SUPABASE_URL and SUPABASE_KEY must be set")
        self.base = url.rstrip("/") + "/rest/v1"
        self.key = key
        self.timeout = timeout
        self.session = session or requests.Session()

    # ─────────────────────────────────────────────────
    # HTTP plumbing
    # ─────────────────────────────────────────────────
    def _headers(self, minimal: bool = False) -> dict:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }
        if minimal:
            headers["Prefer"] = "return=minimal"
        return headers

    def _request(self, method: str, table: str, params: dict | None = None, json=None):
        get_logger().debug("supabase: %s %s %s", method, table, params or "")
        try:
            r = self.session.request(
                method,
                f"{self.base}/{table}",
                params=params,
                json=json,
                headers=self._headers(minimal=method == "POST"),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Supabase {method} {table} failed: {e}") from e
        if r.status_code >= 400:
            raise TransportError(f"Supabase {method} {table} -> {r.status_code}: {r.text[:200]}", r.status_code)
        return r

    def _select(self, table: str, params: dict) -> list:
        r = self._request("GET", table, params=params)
        try:
            rows = r.json()
        except ValueError as e:
            raise ParseError(f"Supabase {table}: non-JSON body") from e
        if not isinstance(rows, list):
            raise ParseError(f"Supabase {table}: expected a list, got {type(rows).__name__}")
        return rows

    # ─────────────────────────────────────────────────
    # RoomStore
    # ─────────────────────────────────────────────────
    def list_rooms(self) -> list[Room]:
        rows = self._select("user", {"select": "room_id"})
        return [Room(room_id=str(row["room_id"])) for row in rows if row.get("room_id")]

    # ─────────────────────────────────────────────────
    # InterestStore
    # ─────────────────────────────────────────────────
    def interests(self, room_id: str) -> list[Interest]:
        rows = self._select("field", {
            "select": "room_id,field_name,priority",
            "room_id": f"eq.{room_id}",
        })
        return [Interest.from_row(row) for row in rows]

    def all_interests(self) -> dict[str, list[Interest]]:
        rows = self._select("field", {"select": "room_id,field_name,priority"})
        by_room = {}
        for row in rows:
            interest = Interest.from_row(row)
            by_room.setdefault(interest.room_id, []).append(interest)
        return by_room

    def count(self, room_id: str) -> int:
        rows = self._select("field", {"select": "count", "room_id": f"eq.{room_id}"})
        try:
            return int(rows[0]["count"]) if rows else 0
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Supabase field count: {rows!r}") from e

    def add(self, room_id: str, topic: str, priority: int):
        self._request("POST", "field", json={
            "room_id": room_id,
            "field_name": topic,
            "priority": priority,
        })

    def delete(self, room_id: str, topic: str):
        self._request("DELETE", "field", params={
            "room_id": f"eq.{room_id}",
            "field_name": f"eq.{topic}",
        })

    # ─────────────────────────────────────────────────
    # HistoryStore
    # ─────────────────────────────────────────────────
    def exists(self, room_id: str, url: str) -> bool:
        rows = self._select("article_history", {
            "select": "article_url",
            "article_url": f"eq.{url}",
            "room_id": f"eq.{room_id}",
            "limit": 1,
        })
        return len(rows) > 0

    def record(self, room_id: str, url: str):
        self._request("POST", "article_history", json={"article_url": url, "room_id": room_id})

    # ─────────────────────────────────────────────────
    # SavedArticleStore
    # ─────────────────────────────────────────────────
    def save(self, room_id: str, content: str):
        self._request("POST", "reserve_article", json={"room_id": room_id, "content": content})
