"""Mapping of imported category hierarchies onto local categories.

Resolution runs in two passes over the whole batch. The first pass decides,
for every source category, which local id it will have (an existing category
with the same name, or a freshly minted id). Only then does the second pass
build insertion records, so parents are always resolvable no matter whether a
child appears before its parent in the input.
"""

from typing import Callable, Iterable, Optional, TypeVar

import structlog

from finmerge.domain.constants import (
    DEFAULT_CATEGORY_TYPE,
    MAX_HIERARCHY_DEPTH,
    ROOT_CATEGORY_TYPES,
)
from finmerge.domain.entities import Category
from finmerge.domain.parsed import ParsedCategory
from finmerge.utils import new_id, normalize_string

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def is_root_marker(source_id: Optional[str]) -> bool:
    """True if the id is one of the reserved top-level domain markers."""
    return source_id is not None and source_id in ROOT_CATEGORY_TYPES


class CategoryHierarchyResolver:
    """Resolves source category ids to local ids for one import run."""

    def __init__(
        self,
        existing_categories: Iterable[Category],
        merge_decisions: Optional[dict[str, str]] = None,
    ):
        """Initialize resolver.

        Args:
            existing_categories: The user's local categories
            merge_decisions: User-approved source id -> local id pairs, applied
                before any name matching
        """
        self.existing_by_id: dict[str, Category] = {}
        self.existing_by_name: dict[str, Category] = {}
        for cat in existing_categories:
            if cat.deleted_at is not None:
                continue
            self.existing_by_id[cat.id] = cat
            # Store order decides which duplicate name wins
            self.existing_by_name.setdefault(normalize_string(cat.name), cat)

        self.id_map: dict[str, str] = {}
        for source_id, target_id in (merge_decisions or {}).items():
            if target_id in self.existing_by_id:
                self.id_map[source_id] = target_id
            else:
                logger.warning("merge_target_missing", source_id=source_id, target_id=target_id)

        self.source_index: dict[str, ParsedCategory] = {}

    def index(self, categories: Iterable[ParsedCategory]) -> None:
        """Remember source categories so parent chains can be walked."""
        for cat in categories:
            self.source_index[cat.id] = cat

    def resolve_ids(self, categories: list[ParsedCategory]) -> dict[str, str]:
        """Pass 1: give every source category a local id.

        Categories already mapped by a merge decision are left alone. Root
        markers are structural only and get no id.

        Returns:
            The completed source id -> local id map
        """
        self.index(categories)
        minted: dict[str, str] = {}
        for cat in categories:
            if cat.id in self.id_map or is_root_marker(cat.id):
                continue
            key = normalize_string(cat.name)
            existing = self.existing_by_name.get(key)
            if existing is not None:
                logger.debug("category_auto_merged", name=cat.name, existing_id=existing.id)
                self.id_map[cat.id] = existing.id
            else:
                # Same-named categories in one batch share a single new record
                self.id_map[cat.id] = minted.setdefault(key, new_id())
        return self.id_map

    def is_new(self, source_id: str) -> bool:
        """True if the source category maps to a not-yet-existing local id."""
        local_id = self.id_map.get(source_id)
        return local_id is not None and local_id not in self.existing_by_id

    def resolve_parent_id(self, cat: ParsedCategory) -> Optional[str]:
        """Local id of the category's parent, or None for top-level."""
        if not cat.parent_id or is_root_marker(cat.parent_id):
            return None
        parent_id = self.id_map.get(cat.parent_id)
        if parent_id == self.id_map.get(cat.id):
            return None
        return parent_id

    def materialize(
        self,
        categories: list[ParsedCategory],
        build: Callable[[ParsedCategory, str, Optional[str]], T],
    ) -> list[T]:
        """Pass 2: build insertion records for genuinely new categories.

        Must run after resolve_ids() has seen the whole batch.

        Args:
            categories: Source categories, in any order
            build: Called as build(source, local_id, parent_id) for each new
                category; its return values are collected

        Returns:
            Built records, in input order
        """
        pending: list[ParsedCategory] = []
        parents: dict[str, Optional[str]] = {}
        for cat in categories:
            if is_root_marker(cat.id) or not self.is_new(cat.id):
                continue
            local_id = self.id_map[cat.id]
            if local_id in parents:
                continue
            pending.append(cat)
            parents[local_id] = self.resolve_parent_id(cat)

        for local_id in parents:
            if self._parent_chain_loops(local_id, parents):
                logger.warning("category_cycle_broken", category_id=local_id)
                parents[local_id] = None

        return [
            build(cat, self.id_map[cat.id], parents[self.id_map[cat.id]])
            for cat in pending
        ]

    def _parent_chain_loops(self, local_id: str, parents: dict[str, Optional[str]]) -> bool:
        """True if following new parents leads back to local_id or never ends.

        Chains that reach an existing category stop there, since existing
        categories are already stored.
        """
        current = parents.get(local_id)
        hops = 0
        while current is not None and current in parents:
            if current == local_id or hops >= MAX_HIERARCHY_DEPTH:
                return True
            current = parents[current]
            hops += 1
        return False

    def resolve_local_id(self, source_id: Optional[str]) -> Optional[str]:
        """Local id for a source category reference, if it was resolved."""
        if not source_id:
            return None
        return self.id_map.get(source_id)

    def resolve_category_type(self, source_id: Optional[str]) -> str:
        """Find a category's domain by walking up to its root marker.

        The walk stops after MAX_HIERARCHY_DEPTH hops so cyclic or broken
        legacy hierarchies fall back to expense instead of looping.
        """
        current = source_id
        depth = 0
        while current and depth < MAX_HIERARCHY_DEPTH:
            if current in ROOT_CATEGORY_TYPES:
                return ROOT_CATEGORY_TYPES[current]
            cat = self.source_index.get(current)
            if cat is None:
                break
            current = cat.parent_id
            depth += 1
        return DEFAULT_CATEGORY_TYPE
