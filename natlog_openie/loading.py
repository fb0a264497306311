from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from .datatypes import Document, Sentence, Token, Polarity, CorefChain, CorefMention, DependencyNode
from .graphing import DependencyGraph

_POLARITIES = {
    "up": Polarity.UPWARD, "upward": Polarity.UPWARD, "upwards": Polarity.UPWARD,
    "down": Polarity.DOWNWARD, "downward": Polarity.DOWNWARD, "downwards": Polarity.DOWNWARD,
    "flat": Polarity.FLAT, "none": Polarity.FLAT, "non-monotone": Polarity.FLAT,
}


def _polarity(value: Optional[str]) -> Polarity:
    if value is None:
        return Polarity.FLAT
    try:
        return _POLARITIES[str(value).lower()]
    except KeyError:
        raise ValueError(f"Unknown polarity: {value!r}") from None


def _tokens(sentence_index: int, raw: List[Dict[str, Any]]) -> List[Token]:
    tokens = []
    for i, t in enumerate(raw, start=1):
        tokens.append(Token(
            word=t["word"],
            tag=t.get("tag", ""),
            ner=t.get("ner") or "O",
            index=i,
            sentence_index=sentence_index,
            lemma=t.get("lemma"),
            polarity=_polarity(t.get("polarity")),
        ))
    return tokens


def graph_from_dependencies(tokens: List[Token], deps: List[Dict[str, Any]]) -> DependencyGraph:
    """Build a graph from ``{"governor", "dependent", "relation"}`` records.

    Indices are 1-based into ``tokens``; governor 0 marks the root.
    """
    nodes = {t.index: DependencyNode(t) for t in tokens}
    graph = DependencyGraph()

    def node(i: int) -> DependencyNode:
        if i not in nodes:
            raise ValueError(f"Dependency refers to missing token {i}")
        return nodes[i]

    for d in deps:
        dep = node(int(d["dependent"]))
        gov = int(d.get("governor", 0))
        if gov == 0 or d.get("relation", "").lower() == "root":
            graph.add_root(dep)
            continue
        governor = node(gov)
        graph.add_vertex(governor)
        graph.add_vertex(dep)
        graph.add_edge(governor, dep, d["relation"],
                       float(d.get("weight", float("-inf"))), bool(d.get("extra", False)))
    return graph


def document_from_dict(data: Dict[str, Any]) -> Document:
    sentences = []
    for i, s in enumerate(data.get("sentences", [])):
        tokens = _tokens(i, s.get("tokens", []))
        collapsed = graph_from_dependencies(tokens, s["dependencies"]) if s.get("dependencies") else None
        basic = graph_from_dependencies(tokens, s["basic_dependencies"]) if s.get("basic_dependencies") else None
        sentences.append(Sentence(index=i, tokens=tokens, collapsed_graph=collapsed, basic_graph=basic))

    chains = []
    for cid, c in enumerate(data.get("coref", [])):
        mentions = [CorefMention(int(m["sentence"]), int(m["start"]), int(m["end"])) for m in c["mentions"]]
        representative = c.get("representative")
        chains.append(CorefChain(chain_id=c.get("id", cid), mentions=mentions,
                                 representative=None if representative is None else int(representative)))
    return Document(doc_id=str(data.get("doc_id", "doc")), sentences=sentences, coref_chains=chains)


def load_document(path: Union[str, Path]) -> Document:
    with open(path, encoding="utf-8") as fh:
        return document_from_dict(json.load(fh))
