"""
Pytest configuration and fixtures for natlog_openie tests
"""
import pytest
from typing import Dict, Optional

from natlog_openie.datatypes import Token, Sentence, Polarity
from natlog_openie.loading import graph_from_dependencies


def build_tokens(spec: str, sentence_index: int = 0, polarity: Optional[Dict[str, Polarity]] = None):
    """Tokens from ``word/TAG[/NER]`` items separated by spaces. Polarity is upward unless overridden."""
    polarity = polarity or {}
    tokens = []
    for i, item in enumerate(spec.split(), start=1):
        parts = item.split("/")
        word, tag = parts[0], parts[1]
        ner = parts[2] if len(parts) > 2 else "O"
        tokens.append(Token(word, tag, ner, i, sentence_index, polarity=polarity.get(word, Polarity.UPWARD)))
    return tokens


def build_sentence(spec: str, deps, sentence_index: int = 0, polarity=None, basic: bool = False) -> Sentence:
    """A sentence whose graph comes from ``(governor, dependent, relation)`` triples."""
    tokens = build_tokens(spec, sentence_index, polarity)
    records = [{"governor": g, "dependent": d, "relation": r} for g, d, r in deps]
    graph = graph_from_dependencies(tokens, records)
    if basic:
        return Sentence(index=sentence_index, tokens=tokens, basic_graph=graph)
    return Sentence(index=sentence_index, tokens=tokens, collapsed_graph=graph)


@pytest.fixture
def make_sentence():
    return build_sentence


@pytest.fixture
def make_tokens():
    return build_tokens


@pytest.fixture
def cat_sentence():
    """The cat is a happy animal ."""
    return build_sentence(
        "The/DT cat/NN is/VBZ a/DT happy/JJ animal/NN ./.",
        [(0, 6, "root"), (2, 1, "det"), (6, 2, "nsubj"), (6, 3, "cop"),
         (6, 4, "det"), (6, 5, "amod"), (6, 7, "punct")],
    )


@pytest.fixture
def former_president_sentence():
    """He is a former president of France (collapsed dependencies)."""
    return build_sentence(
        "He/PRP is/VBZ a/DT former/JJ president/NN of/IN France/NNP/LOCATION",
        [(0, 5, "root"), (5, 1, "nsubj"), (5, 2, "cop"), (5, 3, "det"),
         (5, 4, "amod"), (5, 7, "prep_of")],
    )


SAMPLE_DOCUMENT = {
    "doc_id": "apple",
    "sentences": [
        {
            "tokens": [
                {"word": "Apple", "tag": "NNP", "ner": "ORGANIZATION"},
                {"word": "Inc.", "tag": "NNP", "ner": "ORGANIZATION"},
                {"word": "is", "tag": "VBZ", "polarity": "up"},
                {"word": "a", "tag": "DT"},
                {"word": "large", "tag": "JJ", "polarity": "up"},
                {"word": "company", "tag": "NN"},
            ],
            "dependencies": [
                {"governor": 0, "dependent": 6, "relation": "root"},
                {"governor": 2, "dependent": 1, "relation": "compound"},
                {"governor": 6, "dependent": 2, "relation": "nsubj"},
                {"governor": 6, "dependent": 3, "relation": "cop"},
                {"governor": 6, "dependent": 4, "relation": "det"},
                {"governor": 6, "dependent": 5, "relation": "amod"},
            ],
        },
        {
            "tokens": [
                {"word": "It", "tag": "PRP"},
                {"word": "makes", "tag": "VBZ"},
                {"word": "phones", "tag": "NNS"},
            ],
            "dependencies": [
                {"governor": 0, "dependent": 2, "relation": "root"},
                {"governor": 2, "dependent": 1, "relation": "nsubj"},
                {"governor": 2, "dependent": 3, "relation": "dobj"},
            ],
        },
        {
            "tokens": [{"word": "Yes", "tag": "UH"}],
            "dependencies": [{"governor": 0, "dependent": 1, "relation": "root"}],
        },
    ],
    "coref": [
        {"mentions": [{"sentence": 0, "start": 0, "end": 2}, {"sentence": 1, "start": 0, "end": 1}],
         "representative": 0},
    ],
}


@pytest.fixture
def sample_document_data():
    import copy
    return copy.deepcopy(SAMPLE_DOCUMENT)
