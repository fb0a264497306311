from __future__ import annotations
import logging
from collections import Counter
from typing import List, Iterable, Tuple
import numpy as np
from .datatypes import Document, CorefChain, Token, CanonicalMentionMap

logger = logging.getLogger(__name__)


def _ner_votes(tokens: List[Token]) -> Counter:
    return Counter(t.ner for t in tokens if t.ner and t.ner != "O")


def mention_score(tokens: List[Token]) -> float:
    """NER density of a mention: (count of its dominant NER tag)^2 / length.

    Short mentions with one entity type ("Barack Obama") beat long mixed
    spans ("the president of the United States").
    """
    votes = _ner_votes(tokens)
    if not votes:
        return 0.0
    # most frequent tag; ties go to the alphabetically first one
    _, count = min(votes.items(), key=lambda kv: (-kv[1], kv[0]))
    return count * count / max(1, len(tokens))


def score_chain(chain: CorefChain, document: Document) -> Tuple[List[List[Token]], List[float]]:
    """Candidate token lists for every mention in the chain and their suitability."""
    mentions = chain.mentions
    n = len(mentions)
    candidates: List[List[Token]] = []
    scores: List[float] = []
    for i, mention in enumerate(mentions):
        tokens = document.mention_tokens(mention)
        representative = 1.0 if i == chain.representative else 0.0
        candidates.append(tokens)
        scores.append(mention_score(tokens) + i / n + representative)
    return candidates, scores


def select_canonical_mentions(chains: Iterable[CorefChain], document: Document) -> CanonicalMentionMap:
    """Map every single-token mention of every chain to its chain's canonical mention."""
    mention_map: CanonicalMentionMap = {}
    for chain in chains:
        if len(chain.mentions) < 2:
            continue  # singleton chains carry nothing to resolve

        candidates, scores = score_chain(chain, document)
        canonical = candidates[int(np.argmax(scores))] if scores else None
        assert canonical is not None, f"no canonical mention for chain {chain.chain_id}"

        for tokens in candidates:
            if len(tokens) != 1:
                continue  # only single tokens get replaced
            token_id = tokens[0].token_id
            existing = mention_map.get(token_id)
            if existing and existing[0].ner != "O":
                continue  # keep a good existing mention
            mention_map[token_id] = canonical

        logger.debug("chain %s -> %s", chain.chain_id, " ".join(t.word for t in canonical))
    return mention_map
