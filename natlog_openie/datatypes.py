from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from fractions import Fraction
from typing import List, Dict, Tuple, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .graphing import DependencyGraph

TokenId = Tuple[int, int]  # (sentence index, 1-based token index)

# Annotation keys on a Sentence
ENTAILED_SENTENCES = "entailed_sentences"
RELATION_TRIPLES = "relation_triples"


class Polarity(Enum):
    UPWARD = "up"
    DOWNWARD = "down"
    FLAT = "flat"  # non-monotone

    @property
    def is_upwards(self) -> bool:
        return self is Polarity.UPWARD


@dataclass(frozen=True)
class Token:
    word: str
    tag: str
    ner: str = "O"
    index: int = 0
    sentence_index: int = 0
    lemma: Optional[str] = None
    polarity: Polarity = Polarity.FLAT  # unannotated tokens are not upward

    @property
    def token_id(self) -> TokenId:
        return (self.sentence_index, self.index)


@dataclass(frozen=True, eq=False)
class DependencyNode:
    """A token placed in a dependency graph.

    ``pseudo_position`` orders the node among its siblings. It defaults to the
    token index and is a ``Fraction`` so that new nodes can be spliced between
    two existing positions any number of times.
    """
    token: Token
    pseudo_position: Fraction = None  # type: ignore[assignment]

    def __post_init__(self):
        if self.pseudo_position is None:
            object.__setattr__(self, "pseudo_position", Fraction(self.token.index))
        elif not isinstance(self.pseudo_position, Fraction):
            object.__setattr__(self, "pseudo_position", Fraction(self.pseudo_position))

    @property
    def key(self) -> Tuple[Fraction, TokenId]:
        return (self.pseudo_position, self.token.token_id)

    @property
    def token_id(self) -> TokenId:
        return self.token.token_id

    @property
    def word(self) -> str:
        return self.token.word

    @property
    def tag(self) -> str:
        return self.token.tag

    @property
    def ner(self) -> str:
        return self.token.ner

    @property
    def index(self) -> int:
        return self.token.index

    @property
    def polarity(self) -> Polarity:
        return self.token.polarity

    def __eq__(self, other):
        if not isinstance(other, DependencyNode):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __lt__(self, other: DependencyNode) -> bool:
        return self.key < other.key

    def __repr__(self):
        return f"{self.word}-{float(self.pseudo_position):g}"


@dataclass(frozen=True)
class DependencyEdge:
    governor: DependencyNode
    dependent: DependencyNode
    relation: str
    weight: float = float("-inf")  # -inf: structurally certain
    extra: bool = False


@dataclass(eq=False)
class SentenceFragment:
    """A (sub)graph of a sentence asserted with a truth value and a confidence.

    Two fragments are equal when their graphs have the same structure and they
    agree on ``assumed_truth``; the score is not part of their identity.
    """
    graph: "DependencyGraph"
    assumed_truth: bool = True
    score: float = 1.0
    is_whole_sentence: bool = False

    def change_score(self, score: float) -> SentenceFragment:
        return replace(self, score=score)

    def identity(self):
        return (self.graph.structure_key(), self.assumed_truth)

    def __eq__(self, other):
        if not isinstance(other, SentenceFragment):
            return NotImplemented
        return self.identity() == other.identity()

    def __hash__(self):
        return hash(self.identity())

    def __str__(self):
        return self.graph.gloss()


@dataclass(frozen=True)
class RelationTriple:
    subject: Tuple[Token, ...]
    relation: Tuple[Token, ...]
    object: Tuple[Token, ...]
    confidence: float = 1.0

    @property
    def subject_gloss(self) -> str:
        return " ".join(t.word for t in self.subject)

    @property
    def relation_gloss(self) -> str:
        return " ".join(t.word for t in self.relation)

    @property
    def object_gloss(self) -> str:
        return " ".join(t.word for t in self.object)

    @property
    def confidence_gloss(self) -> str:
        return f"{self.confidence:.3f}"

    def __str__(self):
        return "\t".join([str(self.confidence), self.subject_gloss, self.relation_gloss, self.object_gloss])


@dataclass(frozen=True)
class CorefMention:
    sentence_index: int  # 0-based
    start: int           # 0-based token offset
    end: int             # exclusive


@dataclass
class CorefChain:
    chain_id: int
    mentions: List[CorefMention]  # textual order
    representative: Optional[int] = None  # index into mentions

    @property
    def representative_mention(self) -> Optional[CorefMention]:
        if self.representative is not None and 0 <= self.representative < len(self.mentions):
            return self.mentions[self.representative]
        return None


@dataclass
class Sentence:
    index: int
    tokens: List[Token]
    collapsed_graph: Optional["DependencyGraph"] = None
    basic_graph: Optional["DependencyGraph"] = None
    annotations: Dict[str, object] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return " ".join(t.word for t in self.tokens)

    @property
    def entailed_sentences(self):
        return self.annotations.get(ENTAILED_SENTENCES, set())

    @property
    def relation_triples(self) -> List[RelationTriple]:
        return self.annotations.get(RELATION_TRIPLES, [])


@dataclass
class Document:
    doc_id: str
    sentences: List[Sentence]
    coref_chains: List[CorefChain] = field(default_factory=list)

    def mention_tokens(self, mention: CorefMention) -> List[Token]:
        return self.sentences[mention.sentence_index].tokens[mention.start:mention.end]


CanonicalMentionMap = Dict[TokenId, List[Token]]
