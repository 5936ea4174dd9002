"""
Global tag index.

Aggregates Tag items across synced documents into a tag -> document-id-set
mapping used by the tag filter, tag search and the relationship graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from loguru import logger

from ..models import Item, ItemKind
from ..utils.text_utils import truncate_text


class TagIndex:
    """Mapping from tag text (with its leading '#') to document ids.

    A document id is listed under a tag exactly when the document's
    last-synced items contain a Tag item with that text.
    """

    def __init__(self) -> None:
        self._documents_by_tag: Dict[str, Set[str]] = {}
        self._tags_by_document: Dict[str, Set[str]] = {}

    @classmethod
    def build(cls, corpus: Mapping[str, Sequence[Item]]) -> TagIndex:
        """Build an index from {document_id: items}."""
        index = cls()
        index.rebuild(corpus)
        return index

    def rebuild(self, corpus: Mapping[str, Sequence[Item]]) -> None:
        """Recompute the whole index from the full corpus."""
        self._documents_by_tag = {}
        self._tags_by_document = {}
        for document_id, items in corpus.items():
            self.update_document(document_id, items)
        logger.info(f"Tag index rebuilt: {len(self._documents_by_tag)} tags across {len(corpus)} documents")

    def update_document(self, document_id: str, items: Sequence[Item]) -> None:
        """Replace one document's tag membership with that of its new items."""
        self.remove_document(document_id)
        tags = {item.text for item in items if item.kind is ItemKind.TAG}
        if not tags:
            return

        self._tags_by_document[document_id] = tags
        for tag in tags:
            self._documents_by_tag.setdefault(tag, set()).add(document_id)

    def remove_document(self, document_id: str) -> None:
        for tag in self._tags_by_document.pop(document_id, set()):
            documents = self._documents_by_tag.get(tag)
            if documents is None:
                continue
            documents.discard(document_id)
            if not documents:
                del self._documents_by_tag[tag]

    @property
    def tags(self) -> List[str]:
        return sorted(self._documents_by_tag)

    @property
    def documents(self) -> Set[str]:
        return set(self._tags_by_document)

    def documents_for(self, tag: str) -> Set[str]:
        return set(self._documents_by_tag.get(tag, set()))

    def tags_for(self, document_id: str) -> Set[str]:
        return set(self._tags_by_document.get(document_id, set()))

    def as_dict(self) -> Dict[str, Set[str]]:
        """Snapshot of the mapping; mutating it does not touch the index."""
        return {tag: set(documents) for tag, documents in self._documents_by_tag.items()}

    def documents_with_tags(self, tags: Iterable[str], match_all: bool = True) -> Set[str]:
        """Documents matching a tag selection.

        Args:
            tags: Selected tags. An empty selection matches every indexed document.
            match_all: Require every tag (intersection) instead of any tag (union).

        Returns:
            Matching document ids.
        """
        selected = list(dict.fromkeys(tags))
        if not selected:
            return self.documents

        member_sets = [self._documents_by_tag.get(tag, set()) for tag in selected]
        if match_all:
            return set.intersection(*member_sets)
        return set.union(*member_sets)

    def search(self, query: str) -> List[str]:
        """Tags containing the query, case-insensitively, sorted."""
        needle = query.strip().lower()
        return [tag for tag in self.tags if needle in tag.lower()]

    def __len__(self) -> int:
        return len(self._documents_by_tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._documents_by_tag


@dataclass(frozen=True)
class GraphNode:
    id: str
    label: str
    kind: str  # "document" or "tag"
    weight: int = 1


@dataclass(frozen=True)
class GraphLink:
    source: str
    target: str


@dataclass(frozen=True)
class TagGraph:
    """Bipartite document/tag graph for the relationship view."""
    nodes: List[GraphNode] = field(default_factory=lambda: [])
    links: List[GraphLink] = field(default_factory=lambda: [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [
                {"id": node.id, "label": node.label, "kind": node.kind, "weight": node.weight}
                for node in self.nodes
            ],
            "links": [{"source": link.source, "target": link.target} for link in self.links],
        }


DOCUMENT_LABEL_LENGTH = 24


def build_tag_graph(index: TagIndex, labels: Optional[Mapping[str, str]] = None) -> TagGraph:
    """Build graph nodes and links from a tag index.

    Args:
        index: The tag index.
        labels: Optional short labels per document id.

    Returns:
        TagGraph with one node per tagged document and per tag, and one
        link per document/tag membership.
    """
    labels = labels or {}
    nodes: List[GraphNode] = []
    links: List[GraphLink] = []

    for document_id in sorted(index.documents):
        label = labels.get(document_id) or document_id
        nodes.append(GraphNode(
            id=f"doc:{document_id}",
            label=truncate_text(label, DOCUMENT_LABEL_LENGTH),
            kind="document",
            weight=len(index.tags_for(document_id)),
        ))

    for tag in index.tags:
        documents = index.documents_for(tag)
        nodes.append(GraphNode(id=f"tag:{tag}", label=tag, kind="tag", weight=len(documents)))
        links.extend(GraphLink(source=f"doc:{document_id}", target=f"tag:{tag}") for document_id in sorted(documents))

    logger.debug(f"Tag graph built with {len(nodes)} nodes and {len(links)} links")
    return TagGraph(nodes=nodes, links=links)
