"""
Tests for triple output formats and tables
"""
import logging
import pytest

from natlog_openie.datatypes import RelationTriple, Document
from natlog_openie.formatting import format_triple, format_document, triples_frame, fragments_frame
from natlog_openie.loading import document_from_dict
from natlog_openie.openie import OpenIE, OpenIEConfig


@pytest.fixture
def annotated(sample_document_data):
    document = document_from_dict(sample_document_data)
    return OpenIE(OpenIEConfig(resolve_coref=True)).annotate(document)


def _makes_phones(document):
    sentence = document.sentences[1]
    (triple,) = sentence.relation_triples
    return sentence, triple


class TestFormatTriple:
    """Test format_triple"""

    def test_default(self, annotated):
        sentence, triple = _makes_phones(annotated)
        assert format_triple(triple, sentence, "apple") == "1.0\tApple Inc.\tmakes\tphones"

    def test_ollie(self, annotated):
        sentence, triple = _makes_phones(annotated)
        assert format_triple(triple, sentence, "apple", "ollie") == "1.000: (Apple Inc.; makes; phones)"

    def test_reverb(self, annotated):
        sentence, triple = _makes_phones(annotated)
        fields = format_triple(triple, sentence, "apple", "reverb").split("\t")
        assert len(fields) == 17
        assert fields[:5] == ["apple", "1", "Apple Inc.", "makes", "phones"]
        # relation and object spans within the sentence
        assert fields[7:11] == ["1", "2", "2", "3"]
        assert fields[11] == "1.000"
        assert fields[12] == "It makes phones"

    def test_unknown_format(self, annotated):
        sentence, triple = _makes_phones(annotated)
        with pytest.raises(ValueError):
            format_triple(triple, sentence, "apple", "xml")


class TestFormatDocument:
    """Test document-level output"""

    def test_lines_for_every_triple(self, annotated):
        lines = list(format_document(annotated, "ollie"))
        assert "1.000: (Apple Inc.; makes; phones)" in lines
        assert len(lines) == sum(len(s.relation_triples) for s in annotated.sentences)

    def test_empty_document_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert list(format_document(Document(doc_id="empty", sentences=[]))) == []
        assert "No extractions in: empty" in caplog.text

    def test_frames(self, annotated):
        triples = triples_frame(annotated)
        assert list(triples.columns) == ["Sentence #", "Subject", "Relation", "Object", "Confidence"]
        assert ((triples["Subject"] == "Apple Inc.") & (triples["Sentence #"] == 2)).any()

        fragments = fragments_frame(annotated)
        assert "Inc. is large" in set(fragments["Fragment"])

    def test_empty_frames_keep_columns(self):
        empty = Document(doc_id="empty", sentences=[])
        assert triples_frame(empty).empty
        assert list(fragments_frame(empty).columns)[0] == "Sentence #"


def test_triple_glosses():
    triple = RelationTriple((), (), (), 0.12345)
    assert triple.confidence_gloss == "0.123"
