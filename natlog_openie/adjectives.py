"""Rewrite "X is a JJ NN (prep Y)" into the entailed "X is JJ (prep Y)".

The shortening is only licensed when no privative adjective ("former",
"alleged", ...) modifies the noun at or before the matched adjective, and when
both the adjective and the copula sit in an upward-monotone context.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import List, Iterator, Optional
from .datatypes import DependencyNode, SentenceFragment
from .graphing import DependencyGraph

logger = logging.getLogger(__name__)

PREP_RELATION = re.compile(r"prep_.*")
INDEFINITE_DETERMINERS = {"a", "an"}

PRIVATIVE_ADJECTIVES = frozenset({
    "believed", "debatable", "disputed", "dubious", "hypothetical", "impossible",
    "improbable", "plausible", "putative", "questionable", "so called", "supposed",
    "suspicious", "theoretical", "uncertain", "unlikely", "would - be", "apparent",
    "arguable", "assumed", "likely", "ostensible", "possible", "potential",
    "predicted", "presumed", "probable", "seeming", "anti", "fake", "fictional",
    "fictitious", "imaginary", "mythical", "phony", "false", "artificial",
    "erroneous", "mistaken", "mock", "pseudo", "simulated", "spurious", "deputy",
    "faulty", "virtual", "doubtful", "erstwhile", "ex", "expected", "former",
    "future", "onetime", "past", "proposed", "alleged", "so-called", "would-be",
})


@dataclass(frozen=True)
class AdjectiveMatch:
    obj: DependencyNode
    subj: DependencyNode
    be: DependencyNode
    adj: DependencyNode
    pobj: Optional[DependencyNode] = None
    prep: Optional[str] = None


def find_adjective_matches(graph: DependencyGraph) -> Iterator[AdjectiveMatch]:
    """All bindings of ``obj >nsubj subj >cop be >det a|an >amod adj ?>prep_* pobj``."""
    for obj in graph.vertices():
        edges = graph.outgoing_edges(obj)
        subjs = [e.dependent for e in edges if e.relation == "nsubj"]
        bes = [e.dependent for e in edges if e.relation == "cop"]
        adjs = [e.dependent for e in edges if e.relation == "amod"]
        has_det = any(e.relation == "det" and e.dependent.word in INDEFINITE_DETERMINERS
                      for e in edges)
        if not (subjs and bes and adjs and has_det):
            continue
        preps = [(e.relation, e.dependent) for e in edges if PREP_RELATION.fullmatch(e.relation)]
        for subj in subjs:
            for be in bes:
                for adj in adjs:
                    if not preps:
                        yield AdjectiveMatch(obj, subj, be, adj)
                    for prep, pobj in preps:
                        yield AdjectiveMatch(obj, subj, be, adj, pobj, prep)


def is_privative_blocked(graph: DependencyGraph, match: AdjectiveMatch) -> bool:
    for e in graph.outgoing_edges(match.obj):
        if (e.relation == "amod"
                and e.dependent.pseudo_position <= match.adj.pseudo_position
                and e.dependent.word.lower() in PRIVATIVE_ADJECTIVES):
            return True
    return False


def build_adjective_graph(match: AdjectiveMatch) -> DependencyGraph:
    tree = DependencyGraph()
    tree.add_root(match.adj)
    tree.add_vertex(match.subj)
    tree.add_vertex(match.be)
    tree.add_edge(match.adj, match.be, "cop", float("-inf"), False)
    tree.add_edge(match.adj, match.subj, "nsubj", float("-inf"), False)
    assert (match.pobj is None) == (match.prep is None), \
        f"preposition relation and object must match together: {match}"
    if match.pobj is not None:
        tree.add_vertex(match.pobj)
        tree.add_edge(match.adj, match.pobj, match.prep, float("-inf"), False)
    return tree


def extract_adjective_entailments(fragment: SentenceFragment) -> List[SentenceFragment]:
    out: List[SentenceFragment] = []
    graph = fragment.graph
    for match in find_adjective_matches(graph):
        if is_privative_blocked(graph, match):
            logger.debug("privative modifier blocks %r", match.adj)
            continue
        if not (match.adj.polarity.is_upwards and match.be.polarity.is_upwards):
            continue
        tree = build_adjective_graph(match)
        out.append(SentenceFragment(tree, fragment.assumed_truth, 1.0, False))
    return out
