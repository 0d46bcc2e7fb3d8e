"""External collaborators: Qiita search, Supabase storage, Chatwork, summarizers."""

from .base import (
    ChatClient, HistoryStore, InterestStore, RoomStore, SavedArticleStore,
    SearchProvider, Summarizer,
)

__all__ = [
    "ChatClient", "HistoryStore", "InterestStore", "RoomStore",
    "SavedArticleStore", "SearchProvider", "Summarizer",
]
