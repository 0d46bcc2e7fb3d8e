"""Typed records for rooms, interests, articles and selection outcomes."""

from dataclasses import dataclass, field

from .errors import ParseError

GENERIC_LABEL = "本日の記事"  # "Today's article", used when no interest produced the pick


@dataclass
class Room:
    """A chat room subscribed to the digest."""
    room_id: str


@dataclass
class Interest:
    """A weighted topic a room wants articles about."""
    room_id: str
    topic: str
    priority: int = 3

    @classmethod
    def from_row(cls, row: dict) -> "Interest":
        """Decode a `field` table row."""
        try:
            return cls(
                room_id=str(row["room_id"]),
                topic=str(row["field_name"]),
                priority=int(row.get("priority") or 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Bad interest row {row!r}: {e}") from e


@dataclass
class Article:
    """A Qiita article returned by a search."""
    title: str
    url: str
    created_at: str = ""
    stock_count: int = 0
    likes_count: int = 0
    tags: list[str] = field(default_factory=list)
    author: str = ""
    body: str = ""
    summary: str = ""

    @classmethod
    def from_api(cls, item: dict) -> "Article":
        """Decode one element of the Qiita `/items` response."""
        if not isinstance(item, dict) or not item.get("url"):
            raise ParseError(f"Article without url: {str(item)[:100]}")
        tags = item.get("tags") or []
        user = item.get("user") or {}
        try:
            return cls(
                title=str(item.get("title", "")),
                url=str(item["url"]),
                created_at=str(item.get("created_at", "")),
                stock_count=int(item.get("stocks_count") or 0),
                likes_count=int(item.get("likes_count") or 0),
                tags=[str(t.get("name", "")) for t in tags if isinstance(t, dict)],
                author=str(user.get("id", "")) if isinstance(user, dict) else "",
                body=str(item.get("body", "")),
            )
        except (TypeError, ValueError) as e:
            raise ParseError(f"Bad article payload: {e}") from e


@dataclass
class Outcome:
    """Result of running the selection cascade for one room.

    ``article`` is None when nothing new was found; ``label`` is the interest
    topic that produced the article, or GENERIC_LABEL.
    """
    room_id: str
    article: Article | None = None
    label: str = GENERIC_LABEL
    stage: str = ""
    pruned: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.article is not None


@dataclass
class RunReport:
    """Per-invocation tally printed by the CLI and returned by the web app."""
    processed: int = 0
    delivered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    pruned: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "delivered": self.delivered,
            "skipped": self.skipped,
            "failed": self.failed,
            "pruned": self.pruned,
        }

    def summary(self) -> str:
        """Human-readable one-block status of the run."""
        lines = [
            f"  Rooms processed: {self.processed}",
            f"  [+] delivered: {len(self.delivered)}",
            f"  [ ] skipped:   {len(self.skipped)}",
            f"  [!] failed:    {len(self.failed)}",
        ]
        for room_id, topics in self.pruned.items():
            lines.append(f"  pruned in {room_id}: {', '.join(topics)}")
        return "\n".join(lines)
