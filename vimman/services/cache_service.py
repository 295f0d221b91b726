"""Freshness policy for the completion cache."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from ..cache import CacheRecord, CacheStore
from ..config import CACHE_KEY, DEFAULT_EXPIRE_DAYS, resolve_expire_days
from ..index import DocIndex


class CacheState(str, Enum):
    ABSENT = "absent"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(slots=True)
class CacheLookup:
    index: DocIndex
    state: CacheState
    generated_at: datetime
    rebuilt: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_stale(generated_at: datetime, now: datetime, expire_days: int) -> bool:
    """Return True once more than *expire_days* have passed since *generated_at*."""

    return now - generated_at > timedelta(days=expire_days)


class CompletionCache:
    """Serve the help file index from *store*, rebuilding it when stale.

    The record is all-or-nothing: a rebuild always replaces it completely.
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        expire_days: object = DEFAULT_EXPIRE_DAYS,
        key: str = CACHE_KEY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.expire_days = resolve_expire_days(expire_days)
        self.key = key
        self._clock = clock or _utcnow

    def load(self) -> CacheRecord | None:
        return self.store.load(self.key)

    def state(self, now: datetime | None = None) -> CacheState:
        return self.state_of(self.load(), now)

    def expires_at(self, record: CacheRecord) -> datetime:
        return record.generated_at + timedelta(days=self.expire_days)

    def state_of(self, record: CacheRecord | None, now: datetime | None = None) -> CacheState:
        now = now or self._clock()
        if record is None:
            return CacheState.ABSENT
        if is_stale(record.generated_at, now, self.expire_days):
            return CacheState.STALE
        return CacheState.FRESH

    def get_or_build(
        self,
        build_fn: Callable[[], DocIndex],
        *,
        force: bool = False,
    ) -> CacheLookup:
        now = self._clock()
        record = self.load()
        state = self.state_of(record, now)
        if record is not None and state is CacheState.FRESH and not force:
            return CacheLookup(
                index=record.index,
                state=state,
                generated_at=record.generated_at,
            )
        index = build_fn()
        self.store.save(CacheRecord(key=self.key, generated_at=now, index=index))
        return CacheLookup(index=index, state=state, generated_at=now, rebuilt=True)

    def clear(self) -> bool:
        return self.store.delete(self.key)
