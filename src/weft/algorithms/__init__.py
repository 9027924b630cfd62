"""Algorithms that read a :class:`~weft.core.graph.SparseGraph`."""

from .generators import BarabasiAlbertGenerator
from .pagerank import PageRank, PageRankWithPriors
from .shortest_path import DistanceRecord, UnweightedShortestPath, bfs_distances

__all__ = [
    "BarabasiAlbertGenerator",
    "PageRank",
    "PageRankWithPriors",
    "DistanceRecord",
    "UnweightedShortestPath",
    "bfs_distances",
]
