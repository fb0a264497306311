from __future__ import annotations
import logging
from typing import List, Set, Tuple, Iterable, Optional
import networkx as nx
from .datatypes import DependencyNode, DependencyEdge

logger = logging.getLogger(__name__)

PUNCT_RELATION = "punct"


class DependencyGraph:
    """Directed dependency graph over ``DependencyNode`` vertices.

    Backed by a ``networkx.MultiDiGraph`` whose edge keys are relation labels,
    so a governor/dependent pair holds at most one edge per relation. Every
    edge's endpoints are vertices; removing a vertex drops its edges.
    """

    def __init__(self, nodes: Iterable[DependencyNode] = (), roots: Iterable[DependencyNode] = ()):
        self._g = nx.MultiDiGraph()
        self._roots: Set[DependencyNode] = set()
        for n in nodes:
            self.add_vertex(n)
        for r in roots:
            self.add_root(r)

    # -- vertices --------------------------------------------------------
    def add_vertex(self, node: DependencyNode) -> None:
        self._g.add_node(node)

    def remove_vertex(self, node: DependencyNode) -> None:
        if node in self._g:
            self._g.remove_node(node)
        self._roots.discard(node)

    def vertices(self) -> List[DependencyNode]:
        # snapshot, in sentence order
        return sorted(self._g.nodes)

    def add_root(self, node: DependencyNode) -> None:
        self.add_vertex(node)
        self._roots.add(node)

    @property
    def roots(self) -> List[DependencyNode]:
        return sorted(self._roots)

    @property
    def root(self) -> Optional[DependencyNode]:
        roots = self.roots
        return roots[0] if roots else None

    def size(self) -> int:
        return self._g.number_of_nodes()

    def __len__(self):
        return self.size()

    # -- edges -----------------------------------------------------------
    def add_edge(self, governor: DependencyNode, dependent: DependencyNode, relation: str,
                 weight: float = float("-inf"), extra: bool = False) -> DependencyEdge:
        if governor not in self._g or dependent not in self._g:
            raise ValueError(f"Edge endpoints must be vertices: {governor!r} -{relation}-> {dependent!r}")
        self._g.add_edge(governor, dependent, key=relation, weight=weight, extra=extra)
        return DependencyEdge(governor, dependent, relation, weight, extra)

    def remove_edge(self, edge: DependencyEdge) -> bool:
        if self._g.has_edge(edge.governor, edge.dependent, key=edge.relation):
            self._g.remove_edge(edge.governor, edge.dependent, key=edge.relation)
            return True
        return False

    @staticmethod
    def _edge(u, v, key, data) -> DependencyEdge:
        return DependencyEdge(u, v, key, data.get("weight", float("-inf")), data.get("extra", False))

    def edges(self) -> List[DependencyEdge]:
        out = [self._edge(u, v, k, d) for u, v, k, d in self._g.edges(keys=True, data=True)]
        return sorted(out, key=lambda e: (e.governor.key, e.dependent.key, e.relation))

    def incoming_edges(self, node: DependencyNode) -> List[DependencyEdge]:
        if node not in self._g:
            return []
        return [self._edge(u, v, k, d) for u, v, k, d in self._g.in_edges(node, keys=True, data=True)]

    def outgoing_edges(self, node: DependencyNode) -> List[DependencyEdge]:
        if node not in self._g:
            return []
        out = [self._edge(u, v, k, d) for u, v, k, d in self._g.out_edges(node, keys=True, data=True)]
        return sorted(out, key=lambda e: (e.dependent.key, e.relation))

    def children(self, node: DependencyNode) -> List[DependencyNode]:
        return sorted(set(self._g.successors(node))) if node in self._g else []

    # -- whole graph -----------------------------------------------------
    def copy(self) -> DependencyGraph:
        clone = DependencyGraph()
        clone._g = self._g.copy()
        clone._roots = set(self._roots)
        return clone

    def structure_key(self) -> Tuple:
        """Canonical, hashable serialization of the graph's structure.

        Weights are not part of the structure.
        """
        nodes = tuple(n.key for n in self.vertices())
        edges = tuple(sorted((u.key, v.key, k, bool(d.get("extra", False)))
                             for u, v, k, d in self._g.edges(keys=True, data=True)))
        roots = tuple(r.key for r in self.roots)
        return (nodes, edges, roots)

    def __eq__(self, other):
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self.structure_key() == other.structure_key()

    __hash__ = None  # mutable; fragments hash structure_key() instead

    def gloss(self) -> str:
        return " ".join(n.word for n in self.vertices())

    def to_networkx(self) -> nx.DiGraph:
        """A plain ``DiGraph`` with string labels, for plotting."""
        G = nx.DiGraph()
        for n in self.vertices():
            G.add_node(n, label=n.word, root=n in self._roots)
        for e in self.edges():
            if G.has_edge(e.governor, e.dependent):
                G[e.governor][e.dependent]["label"] += "," + e.relation
            else:
                G.add_edge(e.governor, e.dependent, label=e.relation)
        return G

    def __repr__(self):
        return f"DependencyGraph({self.gloss()!r}, edges={len(self.edges())})"


def clean_graph(graph: DependencyGraph) -> DependencyGraph:
    """Repair a raw parse in place and return it.

    Drops self loops and punctuation arcs, then any punctuation vertex the
    latter leave without edges. Roots are kept regardless.
    """
    roots = set(graph.roots)
    for e in graph.edges():
        if e.governor == e.dependent or e.relation == PUNCT_RELATION:
            graph.remove_edge(e)
    for n in graph.vertices():
        if n in roots:
            continue
        if not graph.incoming_edges(n) and not graph.outgoing_edges(n) and _is_punct(n):
            graph.remove_vertex(n)
    logger.debug("cleaned graph: %s", graph)
    return graph


def _is_punct(node: DependencyNode) -> bool:
    return bool(node.word) and not any(ch.isalnum() for ch in node.word)
