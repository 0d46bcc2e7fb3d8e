"""Save-link handler: copy a posted article message into `reserve_article`."""

from .log import log
from .providers.base import ChatClient, SavedArticleStore


def save_article(chat: ChatClient, store: SavedArticleStore, room_id: str, message_id: str) -> str:
    """Fetch the message the user clicked "save" under and store its body."""
    if not room_id or not message_id:
        raise ValueError("room_id and message_id are required")
    body = chat.get_message(room_id, message_id)
    store.save(room_id, body)
    log(f"{room_id}: saved message {message_id}")
    return body
