"""Abstract collaborators the selection engine and delivery talk to."""

from abc import ABC, abstractmethod

from ..models import Article, Interest, Room


class SearchProvider(ABC):
    """Article search with field-scoped AND queries and a popularity filter."""

    name: str = "unknown"

    @abstractmethod
    def search(self, query) -> list[Article]:
        """Run one search page.

        Returns an empty list at the end of results. Raises RateLimitError when
        the quota is exhausted, TransportError / ParseError otherwise.
        """
        ...


class HistoryStore(ABC):
    """Which article urls each room has already received."""

    @abstractmethod
    def exists(self, room_id: str, url: str) -> bool:
        ...

    @abstractmethod
    def record(self, room_id: str, url: str):
        ...


class InterestStore(ABC):
    """Weighted topics per room."""

    @abstractmethod
    def interests(self, room_id: str) -> list[Interest]:
        ...

    @abstractmethod
    def delete(self, room_id: str, topic: str):
        ...

    @abstractmethod
    def add(self, room_id: str, topic: str, priority: int):
        ...

    def count(self, room_id: str) -> int:
        return len(self.interests(room_id))

    def all_interests(self) -> dict[str, list[Interest]] | None:
        """Every room's interests, keyed by room id.

        None means the store cannot batch and callers load per room.
        """
        return None


class RoomStore(ABC):
    """Registered rooms."""

    @abstractmethod
    def list_rooms(self) -> list[Room]:
        ...


class ChatClient(ABC):
    """Post to and read from chat rooms."""

    @abstractmethod
    def post_message(self, room_id: str, body: str) -> str:
        """Post ``body`` and return the new message id."""
        ...

    @abstractmethod
    def get_message(self, room_id: str, message_id: str) -> str:
        """Return the body of an existing message."""
        ...


class Summarizer(ABC):
    """Short teaser summary of an article body."""

    name: str = "unknown"

    @abstractmethod
    def summarize(self, article: Article) -> str:
        ...


class SavedArticleStore(ABC):
    """Articles a room member chose to keep."""

    @abstractmethod
    def save(self, room_id: str, content: str):
        ...
