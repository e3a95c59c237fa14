# -*- coding: utf-8 -*-
"""
NodeGraph: durable, versioned persistence for node-graph editors.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

noderegistry.py
------------------
Registry of node type definitions.

The persister only needs the ``NodeTypeProvider`` capability (one lookup by
type id); ``NodeTypeRegistry`` is the stock implementation and also serves
graph editing (``Graph.add_node``) and palette search.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import (
    Callable, Dict, Iterator, List, NamedTuple, Optional, Protocol, Tuple,
    runtime_checkable,
)

from nodegraph.core.node import NodeData
from nodegraph.core.port import PortDefinition

from nodegraph.logger import get_logger
log = get_logger("Registry")


@dataclass(frozen=True)
class NodeTypeDefinition:
    """
    Metadata for one node type.

    Attributes:
        type_id:             Unique key, e.g. ``"Math.Add"``.
        display_name:        Palette / title text.
        category:            Slash-separated palette path, e.g. ``"Math/Basic"``.
        default_ports:       Ports every instance starts with, in order.
        allow_dynamic_ports: Instances may add or remove ports freely, so
                             their ports must always be persisted verbatim.
        description:         Free text, searched by ``search``.
        tags:                Extra search keywords.
        create_default_data: Factory for a new instance's user data.
    """
    type_id: str
    display_name: str
    category: str = ""
    default_ports: Tuple[PortDefinition, ...] = ()
    allow_dynamic_ports: bool = False
    description: str = ""
    tags: Tuple[str, ...] = ()
    create_default_data: Optional[Callable[[], NodeData]] = field(
        default=None, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.type_id:
            raise ValueError("type_id must be a non-empty string")
        object.__setattr__(self, "default_ports", tuple(self.default_ports))
        object.__setattr__(self, "tags", tuple(self.tags))
        seen = set()
        for port_def in self.default_ports:
            if port_def.semantic_id in seen:
                raise ValueError(
                    f"Duplicate semantic port id '{port_def.semantic_id}' in type '{self.type_id}'")
            seen.add(port_def.semantic_id)


@runtime_checkable
class NodeTypeProvider(Protocol):
    """Anything that can resolve a type id to its definition (or ``None``)."""

    def get_node_type(self, type_id: str) -> Optional[NodeTypeDefinition]:
        ...


class SearchResult(NamedTuple):
    """
    A single search hit.

    Attributes:
        definition: The matched node type.
        score: Relevance score (higher = better match).
        matched_fields: Names of the fields that matched the query.
    """
    definition: NodeTypeDefinition
    score: float
    matched_fields: List[str]


class NodeTypeRegistry:
    """
    Central repository for node type definitions.

    Structure:
        Category -> [NodeTypeDefinition, ...]   (palette tree)
        type_id  -> NodeTypeDefinition          (O(1) lookup)
    """

    # Field weights for relevance scoring
    FIELD_WEIGHTS = {
        'type_id': 10.0,
        'display_name': 10.0,
        'category': 5.0,
        'tags': 4.0,
        'description': 3.0,
    }

    def __init__(self) -> None:
        self._tree: Dict[str, List[NodeTypeDefinition]] = defaultdict(list)
        self._flat_map: Dict[str, NodeTypeDefinition] = {}

    # ==========================================================================
    # REGISTRATION
    # ==========================================================================

    def register(self, definition: NodeTypeDefinition, overwrite: bool = False) -> NodeTypeDefinition:
        """
        Register a definition.

        Raises:
            ValueError: If the type id is taken and ``overwrite`` is False.
        """
        existing = self._flat_map.get(definition.type_id)
        if existing is not None:
            if not overwrite:
                raise ValueError(f"Node type '{definition.type_id}' is already registered")
            log.warning(f"Overwriting node type '{definition.type_id}'")
            self._tree[existing.category].remove(existing)

        self._flat_map[definition.type_id] = definition
        self._tree[definition.category].append(definition)
        return definition

    def unregister(self, type_id: str) -> bool:
        definition = self._flat_map.pop(type_id, None)
        if definition is None:
            return False
        self._tree[definition.category].remove(definition)
        if not self._tree[definition.category]:
            del self._tree[definition.category]
        return True

    # ==========================================================================
    # LOOKUP
    # ==========================================================================

    def get_node_type(self, type_id: str) -> Optional[NodeTypeDefinition]:
        """Lookup a definition by type id; ``None`` when unknown."""
        return self._flat_map.get(type_id)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._flat_map

    def __iter__(self) -> Iterator[NodeTypeDefinition]:
        return iter(list(self._flat_map.values()))

    def __len__(self) -> int:
        return len(self._flat_map)

    def get_tree(self) -> Dict[str, List[NodeTypeDefinition]]:
        """Category -> definitions, for building palette menus."""
        return {cat: list(defs) for cat, defs in self._tree.items() if defs}

    def get_all_categories(self) -> List[str]:
        return sorted(cat for cat, defs in self._tree.items() if cat and defs)

    # ==========================================================================
    # SEARCH FUNCTIONALITY
    # ==========================================================================

    def search(
        self,
        query: str,
        *,
        case_sensitive: bool = False,
        min_score: float = 0.0,
        limit: Optional[int] = None,
        category_filter: Optional[str] = None,
    ) -> List[SearchResult]:
        """
        Search definitions across type id, display name, category, tags and
        description.

        Args:
            query: Space-separated search terms.
            case_sensitive: Whether matching is case-sensitive.
            min_score: Minimum relevance score to include in results.
            limit: Maximum number of results (None = unlimited).
            category_filter: Only search within this category (exact match).

        Returns:
            Results sorted by score (descending), then type id.

        Example:
            >>> registry.search("math add")[0].definition.type_id
            'Math.Add'
        """
        if not query or not query.strip():
            return []

        normalized = query if case_sensitive else query.lower()
        terms = normalized.split()

        results: List[SearchResult] = []
        for definition in self._flat_map.values():
            if category_filter is not None:
                a = definition.category if case_sensitive else definition.category.lower()
                b = category_filter if case_sensitive else category_filter.lower()
                if a != b:
                    continue

            score, matched = self._calculate_match_score(definition, terms, case_sensitive)
            if score > min_score and matched:
                results.append(SearchResult(definition, score, matched))

        results.sort(key=lambda r: (-r.score, r.definition.type_id))
        if limit is not None and limit > 0:
            results = results[:limit]
        return results

    def _calculate_match_score(
        self,
        definition: NodeTypeDefinition,
        terms: List[str],
        case_sensitive: bool,
    ) -> Tuple[float, List[str]]:
        total_score = 0.0
        matched_fields: List[str] = []

        def check_field(value: str, field_name: str) -> float:
            if not value:
                return 0.0
            weight = self.FIELD_WEIGHTS[field_name]
            normalized = value if case_sensitive else value.lower()
            field_score = 0.0
            for term in terms:
                if term not in normalized:
                    continue
                if normalized == term:
                    field_score += weight * 2.0
                elif normalized.startswith(term):
                    field_score += weight * 1.5
                else:
                    field_score += weight
            if field_score > 0 and field_name not in matched_fields:
                matched_fields.append(field_name)
            return field_score

        total_score += check_field(definition.type_id, 'type_id')
        total_score += check_field(definition.display_name, 'display_name')
        total_score += check_field(definition.category, 'category')
        total_score += check_field(" ".join(definition.tags), 'tags')
        total_score += check_field(definition.description, 'description')
        return total_score, matched_fields
