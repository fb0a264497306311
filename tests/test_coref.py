"""
Tests for pronoun canonicalization in dependency graphs
"""
from fractions import Fraction

from natlog_openie.coref import canonicalize_coref
from natlog_openie.datatypes import DependencyNode, Token


def _by_word(graph, word):
    return next(n for n in graph.vertices() if n.word == word)


class TestCanonicalizeCoref:
    """Test canonicalize_coref graph surgery"""

    def test_graph_without_pronouns_is_copied_unchanged(self, cat_sentence):
        graph = cat_sentence.collapsed_graph
        out = canonicalize_coref(graph, {(0, 2): [Token("Tom", "NNP", "PERSON", 1, 3)]})
        assert out == graph
        assert out is not graph

    def test_unmapped_pronoun_is_left_alone(self, make_sentence):
        sentence = make_sentence("He/PRP sleeps/VBZ", [(0, 2, "root"), (2, 1, "nsubj")])
        out = canonicalize_coref(sentence.collapsed_graph, {})
        assert out == sentence.collapsed_graph

    def test_pronoun_is_replaced_by_mention_chain(self, make_sentence, make_tokens):
        sentence = make_sentence("He/PRP sleeps/VBZ", [(0, 2, "root"), (2, 1, "nsubj")])
        mention = make_tokens("Barack/NNP/PERSON Obama/NNP/PERSON", sentence_index=3)
        graph = sentence.collapsed_graph

        out = canonicalize_coref(graph, {(0, 1): mention})

        assert [n.word for n in out.vertices()] == ["Barack", "Obama", "sleeps"]
        head = _by_word(out, "Obama")
        barack = _by_word(out, "Barack")
        sleeps = _by_word(out, "sleeps")
        assert head.pseudo_position == 1
        assert Fraction(0) < barack.pseudo_position < head.pseudo_position

        (incoming,) = out.incoming_edges(head)
        assert incoming.governor == sleeps
        assert incoming.relation == "nsubj"
        assert incoming.weight == float("-inf")

        (compound,) = out.outgoing_edges(head)
        assert compound.dependent == barack
        assert compound.relation == "compound"
        assert compound.weight == 1.0
        assert compound.extra is False
        assert out.roots == [sleeps]

    def test_input_graph_is_not_mutated(self, make_sentence, make_tokens):
        sentence = make_sentence("He/PRP sleeps/VBZ", [(0, 2, "root"), (2, 1, "nsubj")])
        graph = sentence.collapsed_graph
        before = graph.structure_key()

        out = canonicalize_coref(graph, {(0, 1): make_tokens("Obama/NNP/PERSON", sentence_index=1)})
        out.remove_vertex(_by_word(out, "sleeps"))
        out.add_vertex(DependencyNode(Token("extra", "NN", index=9)))

        assert graph.structure_key() == before
        assert "He" in [n.word for n in graph.vertices()]

    def test_outgoing_edges_move_to_new_head(self, make_sentence, make_tokens):
        sentence = make_sentence(
            "They/PRP all/DT left/VBD",
            [(0, 3, "root"), (3, 1, "nsubj"), (1, 2, "det")],
        )
        out = canonicalize_coref(sentence.collapsed_graph,
                                 {(0, 1): make_tokens("the/DT students/NNS", sentence_index=2)})
        head = _by_word(out, "students")
        relations = {(e.relation, e.dependent.word) for e in out.outgoing_edges(head)}
        assert relations == {("det", "all"), ("compound", "the")}

    def test_possessive_pronoun_is_replaced(self, make_sentence, make_tokens):
        sentence = make_sentence(
            "his/PRP$ dog/NN barks/VBZ",
            [(0, 3, "root"), (3, 2, "nsubj"), (2, 1, "poss")],
        )
        out = canonicalize_coref(sentence.collapsed_graph,
                                 {(0, 1): make_tokens("Tom/NNP/PERSON", sentence_index=1)})
        dog = _by_word(out, "dog")
        assert [(e.relation, e.dependent.word) for e in out.outgoing_edges(dog)] == [("poss", "Tom")]

    def test_root_pronoun_stays_root(self, make_sentence, make_tokens):
        sentence = make_sentence("it/PRP ./.", [(0, 1, "root"), (1, 2, "punct")])
        out = canonicalize_coref(sentence.collapsed_graph,
                                 {(0, 1): make_tokens("the/DT company/NN", sentence_index=1)})
        assert out.root.word == "company"

    def test_long_mentions_get_strictly_decreasing_positions(self, make_sentence, make_tokens):
        sentence = make_sentence("Yesterday/NN she/PRP sang/VBD",
                                 [(0, 3, "root"), (3, 1, "tmod"), (3, 2, "nsubj")])
        mention = make_tokens("the/DT famous/JJ opera/NN singer/NN", sentence_index=4)
        out = canonicalize_coref(sentence.collapsed_graph, {(0, 2): mention})

        words = [n.word for n in out.vertices()]
        assert words == ["Yesterday", "the", "famous", "opera", "singer", "sang"]
        positions = [n.pseudo_position for n in out.vertices()]
        assert positions == sorted(set(positions))
        # all spliced tokens stay between their neighbours
        assert all(Fraction(1) < p <= Fraction(2) for p in positions[1:5])

    def test_two_pronouns_with_same_antecedent(self, make_sentence, make_tokens):
        sentence = make_sentence(
            "He/PRP saw/VBD himself/PRP",
            [(0, 2, "root"), (2, 1, "nsubj"), (2, 3, "dobj")],
        )
        mention = make_tokens("Tom/NNP/PERSON", sentence_index=5)
        out = canonicalize_coref(sentence.collapsed_graph, {(0, 1): mention, (0, 3): mention})
        assert out.gloss() == "Tom saw Tom"
        assert len(out.edges()) == 2
