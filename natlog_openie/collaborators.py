"""Contracts for the components the orchestrator delegates to.

Clause splitting, forward entailment and triple segmentation are pluggable.
The classes at the bottom are small rule-based stand-ins that satisfy the
contracts so a document can be run end to end.
"""
from __future__ import annotations
from typing import List, Optional, Protocol, Sequence, Set
from .datatypes import DependencyNode, RelationTriple, SentenceFragment, Token
from .graphing import DependencyGraph
from .adjectives import PREP_RELATION


class ClauseSplitter(Protocol):
    def split(self, graph: DependencyGraph, assumed_truth: bool) -> List[SentenceFragment]:
        """Candidate clauses of the sentence, best first."""


class ForwardEntailer(Protocol):
    def shorten(self, graph: DependencyGraph, assumed_truth: bool, budget: int) -> List[SentenceFragment]:
        """At most ``budget`` entailed shortenings of a clause."""


class TripleSegmenter(Protocol):
    def segment(self, graph: DependencyGraph, score: Optional[float], strict: bool) -> Optional[RelationTriple]:
        """A triple for the fragment, or None. ``strict`` requires every vertex to be used."""

    def extract(self, graph: DependencyGraph, tokens: Sequence[Token]) -> List[RelationTriple]:
        """Triples read directly off a full sentence graph."""


class GraphCleaner(Protocol):
    def __call__(self, graph: DependencyGraph) -> DependencyGraph: ...


class WholeSentenceSplitter:
    """Treats the sentence itself as its only clause."""

    def split(self, graph: DependencyGraph, assumed_truth: bool) -> List[SentenceFragment]:
        if graph.size() == 0:
            return []
        return [SentenceFragment(graph.copy(), assumed_truth, 1.0, True)]


class NullEntailer:
    """Never shortens anything."""

    def shorten(self, graph: DependencyGraph, assumed_truth: bool, budget: int) -> List[SentenceFragment]:
        return []


RELATION_MODIFIERS = {"aux", "auxpass", "neg"}


def _subtree(graph: DependencyGraph, node: DependencyNode, exclude: Set[DependencyNode] = frozenset()) -> List[DependencyNode]:
    seen = {node}
    stack = [node]
    while stack:
        for child in graph.children(stack.pop()):
            if child not in seen and child not in exclude:
                seen.add(child)
                stack.append(child)
    return sorted(seen)


def _synthetic(word: str, near: DependencyNode) -> Token:
    return Token(word=word, tag="IN", index=0, sentence_index=near.token.sentence_index)


class SimpleSegmenter:
    """Reads subject/verb/object and copular triples off the root of a fragment."""

    def __init__(self, all_nominals: bool = False):
        self.all_nominals = all_nominals

    def segment(self, graph: DependencyGraph, score: Optional[float] = None,
                strict: bool = True) -> Optional[RelationTriple]:
        root = graph.root
        if root is None:
            return None
        edges = graph.outgoing_edges(root)
        by_rel = {}
        for e in edges:
            by_rel.setdefault(e.relation, e.dependent)
        subj = by_rel.get("nsubj") or by_rel.get("nsubjpass")
        if subj is None:
            return None
        preps = [e for e in edges if PREP_RELATION.fullmatch(e.relation)]

        subject = _subtree(graph, subj)
        if "cop" in by_rel:
            be = by_rel["cop"]
            if preps:
                prep = preps[0]
                relation_nodes = [be, root]
                relation = [n.token for n in relation_nodes] + [_synthetic(prep.relation[5:], root)]
                obj = _subtree(graph, prep.dependent)
            else:
                relation_nodes = [be]
                relation = [be.token]
                obj = _subtree(graph, root, exclude={subj, be})
        else:
            modifiers = [e.dependent for e in edges if e.relation in RELATION_MODIFIERS]
            relation_nodes = sorted(modifiers + [root])
            relation = [n.token for n in relation_nodes]
            if "dobj" in by_rel:
                obj = _subtree(graph, by_rel["dobj"])
            elif preps:
                relation.append(_synthetic(preps[0].relation[5:], root))
                obj = _subtree(graph, preps[0].dependent)
            else:
                return None

        if strict:
            used = set(subject) | set(relation_nodes) | set(obj)
            if used != set(graph.vertices()):
                return None
        return RelationTriple(
            subject=tuple(n.token for n in subject),
            relation=tuple(relation),
            object=tuple(n.token for n in obj),
            confidence=1.0 if score is None else score,
        )

    def extract(self, graph: DependencyGraph, tokens: Sequence[Token]) -> List[RelationTriple]:
        """Possessive nominal relations ("Obama's wife" -> Obama; has; wife).

        Only named-entity possessors qualify unless ``all_nominals`` is set.
        """
        out: List[RelationTriple] = []
        for e in graph.edges():
            if e.relation not in ("poss", "nmod:poss"):
                continue
            owner = e.dependent
            if not self.all_nominals and owner.ner == "O":
                continue
            if owner.tag and owner.tag.startswith("PRP"):
                continue
            out.append(RelationTriple(
                subject=(owner.token,),
                relation=(_synthetic("has", owner),),
                object=(e.governor.token,),
                confidence=1.0,
            ))
        return out
