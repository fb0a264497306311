from .datatypes import (Token, Polarity, DependencyNode, DependencyEdge, SentenceFragment, RelationTriple,
                        CorefMention, CorefChain, Sentence, Document, CanonicalMentionMap,
                        ENTAILED_SENTENCES, RELATION_TRIPLES)
from .graphing import DependencyGraph, clean_graph
from .coref import canonicalize_coref
from .mentions import mention_score, select_canonical_mentions
from .adjectives import PRIVATIVE_ADJECTIVES, extract_adjective_entailments
from .collaborators import WholeSentenceSplitter, NullEntailer, SimpleSegmenter
from .openie import OpenIE, OpenIEConfig, MissingParseError
from .loading import document_from_dict, load_document
from .formatting import format_triple, format_document, triples_frame, fragments_frame
