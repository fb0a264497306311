from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields
from typing import Collection, Dict, List, Mapping, Optional, Set, get_type_hints
from pydantic import TypeAdapter, ValidationError
from .datatypes import (Document, Sentence, SentenceFragment, RelationTriple, CanonicalMentionMap,
                        ENTAILED_SENTENCES, RELATION_TRIPLES)
from .graphing import DependencyGraph, clean_graph
from .coref import canonicalize_coref
from .mentions import select_canonical_mentions
from .adjectives import extract_adjective_entailments
from .collaborators import (ClauseSplitter, ForwardEntailer, TripleSegmenter, GraphCleaner,
                            WholeSentenceSplitter, NullEntailer, SimpleSegmenter)

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("default", "reverb", "ollie")


class MissingParseError(RuntimeError):
    """A sentence reached the extractor without any dependency graph."""


@dataclass
class OpenIEConfig:
    splitter_threshold: float = 0.1       # minimum clause score kept
    splitter_disable: bool = False
    entailments_per_sentence: int = 1000  # forward entailer budget
    triple_strict: bool = True            # triples must consume the whole fragment
    triple_all_nominals: bool = False
    resolve_coref: bool = False
    threads: int = 1
    output_format: str = "default"

    # property name -> field name
    _PROPERTY_NAMES = {
        "splitter.threshold": "splitter_threshold",
        "splitter.disable": "splitter_disable",
        "max_entailments_per_clause": "entailments_per_sentence",
        "triple.strict": "triple_strict",
        "triple.all_nominals": "triple_all_nominals",
        "resolve_coref": "resolve_coref",
        "threads": "threads",
        "format": "output_format",
    }

    def __post_init__(self):
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {self.output_format}")
        if self.threads < 1:
            raise ValueError(f"threads must be positive, got {self.threads}")

    @classmethod
    def from_properties(cls, props: Mapping[str, object]) -> OpenIEConfig:
        """Build a config from properties, with or without an ``openie.`` prefix.

        Values are validated against the field types, so ``"true"`` or ``"3"``
        are coerced while ``5`` for a flag or ``2.5`` for a count are rejected.
        """
        hints = get_type_hints(cls)
        types = {f.name: hints[f.name] for f in fields(cls)}
        values: Dict[str, object] = {}
        for key, raw in props.items():
            name = key[len("openie."):] if key.startswith("openie.") else key
            attr = cls._PROPERTY_NAMES.get(name)
            if attr is None:
                logger.debug("ignoring property %s", key)
                continue
            values[attr] = _coerce(raw, types[attr], key)
        return cls(**values)


def _coerce(raw: object, field_type: type, key: str):
    if isinstance(raw, str):
        raw = raw.strip()
    try:
        value = TypeAdapter(field_type).validate_python(raw)
    except ValidationError as e:
        raise ValueError(f"Bad value for {key}: {raw!r}") from e
    return value.lower() if isinstance(value, str) else value


class OpenIE:
    """Natural-logic open information extraction over dependency graphs.

    Stage 1 splits a sentence into clauses, stage 2 shortens every clause into
    entailed fragments, stage 3 segments fragments into relation triples.
    """

    def __init__(self,
                 config: Optional[OpenIEConfig] = None,
                 splitter: Optional[ClauseSplitter] = None,
                 entailer: Optional[ForwardEntailer] = None,
                 segmenter: Optional[TripleSegmenter] = None,
                 cleaner: Optional[GraphCleaner] = None):
        self.config = config or OpenIEConfig()
        if self.config.splitter_disable:
            self.splitter = None
        else:
            self.splitter = splitter if splitter is not None else WholeSentenceSplitter()
        self.entailer = entailer if entailer is not None else NullEntailer()
        self.segmenter = segmenter if segmenter is not None else SimpleSegmenter(self.config.triple_all_nominals)
        self.cleaner = cleaner if cleaner is not None else clean_graph

    # -- stage 1 ---------------------------------------------------------
    def clauses_in_sentence(self, graph: DependencyGraph, assumed_truth: bool = True) -> List[SentenceFragment]:
        if self.splitter is None:
            return []
        clauses = self.splitter.split(graph, assumed_truth)
        return [c for c in clauses if c.score >= self.config.splitter_threshold]

    # -- stage 2 ---------------------------------------------------------
    def entailments_from_clause(self, clause: SentenceFragment) -> List[SentenceFragment]:
        """Shortened fragments of a clause, the clause itself, then adjective rewrites."""
        if clause.graph.size() == 0:
            return []
        out: List[SentenceFragment] = []
        if self.config.entailments_per_sentence > 0:
            shortened = self.entailer.shorten(clause.graph, clause.assumed_truth,
                                             self.config.entailments_per_sentence)
            out.extend(f.change_score(f.score * clause.score) for f in shortened)
        out.append(clause)
        out.extend(f.change_score(f.score * clause.score) for f in extract_adjective_entailments(clause))
        return out

    def entailments_from_clauses(self, clauses: Collection[SentenceFragment]) -> Set[SentenceFragment]:
        entailments: Set[SentenceFragment] = set()
        for clause in clauses:
            entailments.update(self.entailments_from_clause(clause))
        return entailments

    # -- stage 3 ---------------------------------------------------------
    def relation_in_fragment(self, fragment: SentenceFragment) -> Optional[RelationTriple]:
        return self.segmenter.segment(fragment.graph, fragment.score, self.config.triple_strict)

    def relations_in_fragments(self, fragments: Collection[SentenceFragment]) -> List[RelationTriple]:
        out = []
        for fragment in fragments:
            triple = self.relation_in_fragment(fragment)
            if triple is not None:
                out.append(triple)
        return out

    def relations_in_clause(self, clause: SentenceFragment) -> List[RelationTriple]:
        return self.relations_in_fragments(self.entailments_from_clause(clause))

    def relations_in_sentence(self, sentence: Sentence) -> List[RelationTriple]:
        graph = self._sentence_graph(sentence)
        return self.relations_in_fragments(self.entailments_from_clauses(self.clauses_in_sentence(graph)))

    # -- annotation ------------------------------------------------------
    @staticmethod
    def _sentence_graph(sentence: Sentence) -> DependencyGraph:
        graph = sentence.collapsed_graph if sentence.collapsed_graph is not None else sentence.basic_graph
        if graph is None:
            raise MissingParseError(f"Cannot run OpenIE without a parse tree (sentence {sentence.index})")
        return graph

    def annotate_sentence(self, sentence: Sentence, mention_map: Optional[CanonicalMentionMap] = None) -> None:
        if len(sentence.tokens) < 2:
            # too short to say anything
            sentence.annotations[ENTAILED_SENTENCES] = set()
            sentence.annotations[RELATION_TRIPLES] = []
            return

        parse = self.cleaner(self._sentence_graph(sentence))

        canonical = parse
        if self.config.resolve_coref and mention_map:
            canonical = canonicalize_coref(parse, mention_map)

        clauses = self.clauses_in_sentence(canonical, True)
        fragments = self.entailments_from_clauses(clauses)

        # the raw parse catches what coreference rewriting could break
        extractions = list(self.segmenter.extract(parse, sentence.tokens))
        extractions.extend(self.relations_in_fragments(fragments))

        sentence.annotations[ENTAILED_SENTENCES] = fragments
        sentence.annotations[RELATION_TRIPLES] = list(dict.fromkeys(extractions))
        logger.debug("sentence %d: %d clauses, %d fragments, %d triples",
                     sentence.index, len(clauses), len(fragments), len(sentence.relation_triples))

    def canonical_mentions(self, document: Document) -> CanonicalMentionMap:
        if not self.config.resolve_coref or not document.coref_chains:
            return {}
        return select_canonical_mentions(document.coref_chains, document)

    def annotate(self, document: Document) -> Document:
        """Annotate every sentence; the mention map is built first and shared read-only."""
        mention_map = self.canonical_mentions(document)
        if self.config.threads > 1 and len(document.sentences) > 1:
            with ThreadPoolExecutor(max_workers=self.config.threads) as pool:
                futures = [pool.submit(self.annotate_sentence, s, mention_map) for s in document.sentences]
                for future in futures:
                    future.result()
        else:
            for sentence in document.sentences:
                self.annotate_sentence(sentence, mention_map)
        return document
