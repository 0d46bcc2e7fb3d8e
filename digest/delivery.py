"""Post a selected article into its room, then remember it."""

from urllib.parse import urlencode

from .errors import DigestError
from .log import get_logger
from .models import GENERIC_LABEL, Article, Outcome
from .providers.base import ChatClient, HistoryStore, Summarizer

SAVE_PROMPT = "保存する場合は以下のリンクをクリック:"  # "Click the link below to save"


def headline(label: str) -> str:
    """Message title: the interest topic in brackets, or the generic label."""
    if not label or label == GENERIC_LABEL:
        return GENERIC_LABEL
    return f"「{label}」の記事"  # "Article about <topic>"


def format_article_message(article: Article, label: str) -> str:
    """Chatwork info-block message for one article."""
    tag_line = f"\nタグ: {', '.join(article.tags)}" if article.tags else ""
    return (
        f"[info][title]{headline(label)}[/title]{article.title}\n"
        f"{article.url}\n\n"
        f"{article.summary}{tag_line}[/info]"
    )


def save_link(base_url: str, room_id: str, message_id: str) -> str:
    query = urlencode({"room_id": room_id, "message_id": message_id})
    return f"{base_url.rstrip('/')}/save?{query}"


def format_save_message(base_url: str, room_id: str, message_id: str) -> str:
    return f"{SAVE_PROMPT}\n{save_link(base_url, room_id, message_id)}"


class Deliverer:
    """Summarize, post, record history, then offer the save link.

    Summary and article post failures propagate to the caller. History is
    written as soon as the article message is in the room, so a failed save
    link post is only logged.
    """

    def __init__(self, chat: ChatClient, summarizer: Summarizer, history: HistoryStore, base_url: str):
        self.chat = chat
        self.summarizer = summarizer
        self.history = history
        self.base_url = base_url

    def deliver(self, outcome: Outcome) -> str:
        """Deliver a found outcome; returns the article message id."""
        if not outcome.found:
            raise ValueError(f"Nothing to deliver for room {outcome.room_id}")
        logger = get_logger()
        article = outcome.article
        room_id = outcome.room_id

        article.summary = self.summarizer.summarize(article)
        logger.debug("%s: summary via %s (%d chars)", room_id, self.summarizer.name, len(article.summary))

        message_id = self.chat.post_message(room_id, format_article_message(article, outcome.label))
        self.history.record(room_id, article.url)
        logger.info("%s: delivered %s", room_id, article.url)

        try:
            self.chat.post_message(room_id, format_save_message(self.base_url, room_id, message_id))
        except DigestError as e:
            logger.warning("%s: save link not posted: %s", room_id, e)
        return message_id
