"""Persisted vocabulary of tags seen on detail pages."""
import logging
from functools import lru_cache
from typing import Iterable, List

from pyuca import Collator

from schemas import FilterOption
from storage import KeyValueStore

logger = logging.getLogger(__name__)

TAG_VOCABULARY_KEY = "esjzone.tag_vocabulary"


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Loading the collation table is slow; do it once per process
    return Collator()


def collation_key(tag: str):
    return _collator().sort_key(tag)


class TagVocabulary:
    """
    Append-only tag set stored under one key of the persistence collaborator.

    Each call reads the current set; writes happen only when something new
    was added. Concurrent writers race and the last one wins.
    """

    def __init__(self, store: KeyValueStore, key: str = TAG_VOCABULARY_KEY):
        self.store = store
        self.key = key

    def load(self) -> List[str]:
        raw = self.store.get(self.key)
        if not isinstance(raw, (list, tuple)):
            return []
        return [str(tag) for tag in raw]

    def merge(self, tags: Iterable[str]) -> List[str]:
        """
        Add unseen tags.

        Returns:
            The tags that were actually added
        """
        known = self.load()
        present = set(known)
        added = []

        for tag in tags:
            if not tag or tag in present:
                continue
            present.add(tag)
            added.append(tag)

        if added:
            self.store.set(self.key, known + added)
            logger.info(f"Tag vocabulary grew by {len(added)} to {len(known) + len(added)} tags")

        return added

    def as_filter_options(self) -> List[FilterOption]:
        tags = sorted(self.load(), key=collation_key)
        return [FilterOption(label=tag, value=tag) for tag in tags]
