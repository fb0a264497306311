from __future__ import annotations
import logging
from typing import Iterator, List, Tuple, Sequence
import pandas as pd
from .datatypes import Document, Sentence, RelationTriple, Token
from .openie import OUTPUT_FORMATS

logger = logging.getLogger(__name__)


def _span(tokens: Sequence[Token]) -> Tuple[int, int]:
    # 0-based, end exclusive; synthetic tokens (index 0) have no position
    idx = [t.index for t in tokens if t.index > 0]
    if not idx:
        return (-1, -1)
    return (min(idx) - 1, max(idx))


def _lemmas(tokens: Sequence[Token]) -> str:
    return " ".join(t.lemma or t.word for t in tokens)


def to_reverb(triple: RelationTriple, sentence: Sentence, doc_id: str) -> str:
    s_start, s_end = _span(triple.subject)
    r_start, r_end = _span(triple.relation)
    o_start, o_end = _span(triple.object)
    fields = [
        doc_id, str(sentence.index),
        triple.subject_gloss, triple.relation_gloss, triple.object_gloss,
        str(s_start), str(s_end), str(r_start), str(r_end), str(o_start), str(o_end),
        triple.confidence_gloss,
        " ".join(t.word for t in sentence.tokens),
        " ".join(t.tag for t in sentence.tokens),
        _lemmas(triple.subject), _lemmas(triple.relation), _lemmas(triple.object),
    ]
    return "\t".join(fields)


def to_ollie(triple: RelationTriple) -> str:
    return f"{triple.confidence_gloss}: ({triple.subject_gloss}; {triple.relation_gloss}; {triple.object_gloss})"


def format_triple(triple: RelationTriple, sentence: Sentence, doc_id: str, fmt: str = "default") -> str:
    if fmt == "reverb":
        return to_reverb(triple, sentence, doc_id)
    if fmt == "ollie":
        return to_ollie(triple)
    if fmt == "default":
        return str(triple)
    raise ValueError(f"Format is not implemented: {fmt} (expected one of {OUTPUT_FORMATS})")


def format_document(document: Document, fmt: str = "default") -> Iterator[str]:
    empty = True
    for sentence in document.sentences:
        for triple in sentence.relation_triples:
            empty = False
            yield format_triple(triple, sentence, document.doc_id, fmt)
    if empty:
        logger.warning("No extractions in: %s", document.doc_id)


def triples_frame(document: Document) -> pd.DataFrame:
    rows: List[dict] = []
    for sentence in document.sentences:
        for triple in sentence.relation_triples:
            rows.append({
                "Sentence #": sentence.index + 1,
                "Subject": triple.subject_gloss,
                "Relation": triple.relation_gloss,
                "Object": triple.object_gloss,
                "Confidence": triple.confidence,
            })
    return pd.DataFrame(rows, columns=["Sentence #", "Subject", "Relation", "Object", "Confidence"])


def fragments_frame(document: Document) -> pd.DataFrame:
    rows: List[dict] = []
    for sentence in document.sentences:
        for fragment in sorted(sentence.entailed_sentences, key=lambda f: (-f.score, str(f))):
            rows.append({
                "Sentence #": sentence.index + 1,
                "Fragment": str(fragment),
                "Score": fragment.score,
                "Whole Sentence": fragment.is_whole_sentence,
                "Assumed Truth": fragment.assumed_truth,
            })
    return pd.DataFrame(rows, columns=["Sentence #", "Fragment", "Score", "Whole Sentence", "Assumed Truth"])
