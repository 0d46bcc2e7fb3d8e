"""Turn a chat message like "Go, cursor rules、Ｒｕｓｔ" into room interests."""

import re
from dataclasses import dataclass, field
from urllib.parse import unquote

from .config import DEFAULT_PRIORITY, MAX_INTERESTS
from .errors import ParseError, RegistrationError, TransportError
from .log import get_logger, log
from .providers.base import ChatClient, InterestStore, SearchProvider
from .selection.query import SearchQuery, scoped_terms

SEPARATORS = re.compile(r"[,、\n]")
_FULLWIDTH_ALNUM = str.maketrans(
    "ＡＢＣＤＥＦＧＨＩＪＫＬＭＮＯＰＱＲＳＴＵＶＷＸＹＺ"
    "ａｂｃｄｅｆｇｈｉｊｋｌｍｎｏｐｑｒｓｔｕｖｗｘｙｚ"
    "０１２３４５６７８９",
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789",
)


def normalize_word(word: str) -> str:
    """Collapse spaces (incl. full-width), half-width alnum, Capitalize ASCII words."""
    word = " ".join(word.replace("　", " ").split())
    word = word.translate(_FULLWIDTH_ALNUM)
    if word and word[0].isascii() and word[0].isalpha():
        word = word[0].upper() + word[1:].lower()
    return word


def parse_words(message: str) -> list[str]:
    """Split a registration message into normalized, non-empty words."""
    words = []
    for raw in SEPARATORS.split(message):
        word = normalize_word(raw)
        if word:
            words.append(word)
    return words


def decode_message(message: str) -> str:
    """Undo the percent-encoding some webhook relays apply twice."""
    try:
        return unquote(message, errors="strict")
    except UnicodeDecodeError as e:
        raise RegistrationError(f"Could not decode message: {e}") from e


@dataclass
class RegistrationResult:
    registered: list[str] = field(default_factory=list)
    skipped: dict = field(default_factory=dict)  # word -> reason

    @property
    def message(self) -> str:
        """Confirmation posted back to the room: "<words> を登録しました"."""
        return f"{'、'.join(self.registered)} を登録しました"


class Registrar:
    """Validates words against Qiita and stores them as interests."""

    def __init__(self, search: SearchProvider, interests: InterestStore, chat: ChatClient | None = None,
                 max_interests: int = MAX_INTERESTS, priority: int = DEFAULT_PRIORITY):
        self.search = search
        self.interest_store = interests
        self.chat = chat
        self.max_interests = max_interests
        self.priority = priority

    def _has_articles(self, word: str) -> bool:
        query = SearchQuery(query=" ".join(scoped_terms(word, "title")), page=1, per_page=1)
        return bool(self.search.search(query))

    def register(self, room_id: str, message: str) -> RegistrationResult:
        if not room_id or not message:
            raise RegistrationError("message and room_id are required")
        logger = get_logger()
        result = RegistrationResult()

        words = parse_words(decode_message(message))
        logger.debug("%s: registration words %s", room_id, words)

        try:
            existing = {i.topic.lower() for i in self.interest_store.interests(room_id)}
        except (TransportError, ParseError) as e:
            raise RegistrationError(f"Could not load interests for {room_id}: {e}") from e

        for word in words:
            if word.lower() in existing:
                result.skipped[word] = "already registered"
                continue
            try:
                if not self._has_articles(word):
                    result.skipped[word] = "no articles"
                    continue
                if self.interest_store.count(room_id) >= self.max_interests:
                    result.skipped[word] = "limit reached"
                    continue
                self.interest_store.add(room_id, word, self.priority)
            except (TransportError, ParseError) as e:
                logger.warning("%s: could not register %r: %s", room_id, word, e)
                result.skipped[word] = "error"
                continue
            existing.add(word.lower())
            result.registered.append(word)
            log(f"{room_id}: registered {word!r}")

        if result.registered and self.chat is not None:
            self.chat.post_message(room_id, result.message)
        return result
