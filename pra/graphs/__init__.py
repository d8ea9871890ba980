"""
Graphs Module.

Classes:
    Graph: Interface the feature pipeline walks over
    NetworkXGraph: In-memory graph backed by a NetworkX MultiDiGraph

GraphExplorer lives in pra.graphs.explorer.
"""

from .graph import Graph, NetworkXGraph, inverse_edge_name

__all__ = [
    'Graph',
    'NetworkXGraph',
    'inverse_edge_name',
]
