"""Sparse rate-table resolution with ordered fallback stages."""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class MatchStage(Generic[T]):
    """One resolution attempt: entries passing ``predicate`` are candidates.

    When several entries match, the one with the greatest ``rank`` wins
    (first in table order when ``rank`` is None or on ties).
    """

    name: str
    predicate: Callable[[T], bool]
    rank: Callable[[T], Any] | None = None


@dataclass(frozen=True)
class Lookup(Generic[T]):
    entry: T | None
    stage: str | None  # name of the stage that matched, None when exhausted
    was_fallback: bool

    @property
    def found(self) -> bool:
        return self.entry is not None


def resolve(entries: Iterable[T], stages: list[MatchStage[T]]) -> Lookup[T]:
    """Try each stage in order and return the first hit.

    Any hit after the first stage is flagged ``was_fallback``; when every
    stage misses the lookup is empty and also flagged as a fallback.
    """
    entries = list(entries)
    for i, stage in enumerate(stages):
        matches = [e for e in entries if stage.predicate(e)]
        if not matches:
            continue
        if stage.rank is None:
            best = matches[0]
        else:
            best = matches[0]
            best_rank = stage.rank(best)
            for e in matches[1:]:
                r = stage.rank(e)
                if r > best_rank:
                    best, best_rank = e, r
        return Lookup(entry=best, stage=stage.name, was_fallback=i > 0)
    return Lookup(entry=None, stage=None, was_fallback=True)
