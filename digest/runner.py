"""One batch: every registered room gets at most one new article."""

import random

from .delivery import Deliverer
from .errors import ParseError, TransportError
from .log import get_logger, log
from .models import Outcome, Room, RunReport
from .providers.base import InterestStore, RoomStore
from .selection import CascadeConfig, SelectionCascade


class BatchRunner:
    """Runs the selection cascade room by room and hands hits to delivery.

    Rooms are processed sequentially. Whatever goes wrong inside one room is
    logged and counted as a failure; the next room still runs.
    """

    def __init__(self, rooms: RoomStore, interests: InterestStore,
                 cascade: SelectionCascade, deliverer: Deliverer | None = None):
        self.rooms = rooms
        self.interest_store = interests
        self.cascade = cascade
        self.deliverer = deliverer

    def _load_interests(self) -> dict | None:
        """Bulk-load interests when the store supports it; None means per room."""
        try:
            return self.interest_store.all_interests()
        except (TransportError, ParseError) as e:
            get_logger().warning("Bulk interest load failed (%s) — loading per room", e)
            return None

    def run(self, dry_run: bool = False) -> RunReport:
        logger = get_logger()
        report = RunReport()

        rooms = self.rooms.list_rooms()
        if not rooms:
            log("No registered rooms.")
            return report

        by_room = self._load_interests()
        log(f"Processing {len(rooms)} room(s)...")

        for room in rooms:
            if not room.room_id:
                continue
            report.processed += 1
            try:
                interests = by_room.get(room.room_id, []) if by_room is not None else None
                outcome = self.cascade.select(room, interests)
                if outcome.pruned:
                    report.pruned[room.room_id] = list(outcome.pruned)

                if not outcome.found:
                    log(f"{room.room_id}: no new article — skipped")
                    report.skipped.append(room.room_id)
                    continue

                log(f"{room.room_id}: [{outcome.stage}] {outcome.article.title}")
                if dry_run or self.deliverer is None:
                    report.delivered.append(room.room_id)
                    continue
                self.deliverer.deliver(outcome)
                report.delivered.append(room.room_id)
            except Exception as e:
                logger.exception("%s: failed — %s", room.room_id, e)
                report.failed.append(room.room_id)

        return report

    def preview(self, room_id: str) -> Outcome:
        """Run the cascade for a single room without delivering."""
        return self.cascade.select(Room(room_id=room_id))


def build_runner(settings, rng: random.Random | None = None) -> BatchRunner:
    """Wire the real Qiita / Supabase / Chatwork collaborators."""
    from .providers.chatwork import ChatworkClient
    from .providers.qiita import QiitaSearch
    from .providers.summarizer import get_summarizer
    from .providers.supabase import SupabaseStore

    settings.require()
    store = SupabaseStore(settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout)
    search = QiitaSearch(settings.qiita_token, timeout=settings.request_timeout)
    cascade = SelectionCascade(
        search, store, store,
        config=CascadeConfig(page_budget=settings.page_budget),
        rng=rng,
    )
    deliverer = Deliverer(
        chat=ChatworkClient(settings.chatwork_token, timeout=settings.request_timeout),
        summarizer=get_summarizer(settings),
        history=store,
        base_url=settings.base_url,
    )
    return BatchRunner(store, store, cascade, deliverer)
