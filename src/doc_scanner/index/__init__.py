"""
Cross-document indexes

Tag index, tag graph and dashboard aggregation over synced items.
"""

from .tag_index import TagIndex, TagGraph, GraphNode, GraphLink, build_tag_graph
from .dashboard import DashboardView, SortKey, StatusFilter, aggregate

__all__ = [
    'TagIndex',
    'TagGraph',
    'GraphNode',
    'GraphLink',
    'build_tag_graph',
    'DashboardView',
    'SortKey',
    'StatusFilter',
    'aggregate',
]
