from __future__ import annotations
import logging
from fractions import Fraction
from .datatypes import DependencyNode, CanonicalMentionMap
from .graphing import DependencyGraph

logger = logging.getLogger(__name__)

COMPOUND_RELATION = "compound"
PRONOUN_TAG_PREFIX = "PRP"  # PRP and PRP$


def canonicalize_coref(graph: DependencyGraph, mention_map: CanonicalMentionMap) -> DependencyGraph:
    """Return a copy of ``graph`` with pronouns replaced by their canonical mention.

    The last token of the mention takes the pronoun's place and its edges; the
    remaining tokens hang off it as ``compound`` dependents placed just before
    it. The input graph is left untouched.
    """
    parse = graph.copy()
    for node in parse.vertices():  # snapshot; the loop adds and removes vertices
        if not node.tag or not node.tag.startswith(PRONOUN_TAG_PREFIX):
            continue
        mention = mention_map.get(node.token_id)
        if not mention:
            continue

        # 1. save the attaching edges
        incoming = parse.incoming_edges(node)
        outgoing = parse.outgoing_edges(node)
        was_root = node in parse.roots
        # 2. drop the pronoun
        parse.remove_vertex(node)
        # 3. the new head word
        head = DependencyNode(mention[-1], node.pseudo_position)
        if was_root:
            parse.add_root(head)
        else:
            parse.add_vertex(head)
        for e in incoming:
            parse.add_edge(e.governor, head, e.relation, e.weight, e.extra)
        for e in outgoing:
            parse.add_edge(head, e.dependent, e.relation, e.weight, e.extra)
        # 4. the rest of the mention, right to left
        step = Fraction(1, len(mention))
        for k, token in enumerate(reversed(mention[:-1]), start=1):
            dependent = DependencyNode(token, head.pseudo_position - k * step)
            parse.add_vertex(dependent)
            parse.add_edge(head, dependent, COMPOUND_RELATION, 1.0, False)

        logger.debug("replaced pronoun %r with %r", node, " ".join(t.word for t in mention))
    return parse
