from __future__ import annotations
import streamlit as st
import json
import pandas as pd
import numpy as np
from typing import List, Dict, Any
import matplotlib.pyplot as plt
import networkx as nx
import io

from natlog_openie.openie import OpenIE, OpenIEConfig, OUTPUT_FORMATS
from natlog_openie.loading import document_from_dict
from natlog_openie.coref import canonicalize_coref
from natlog_openie.graphing import DependencyGraph
from natlog_openie.formatting import format_document, triples_frame, fragments_frame

SAMPLE_DOCUMENT: Dict[str, Any] = {
    "doc_id": "sample",
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
    ],
    "coref": [
        {"mentions": [{"sentence": 0, "start": 0, "end": 2}, {"sentence": 1, "start": 0, "end": 1}],
         "representative": 0},
    ],
}


def load_document_from_file(uploaded_file):
    """Load a parsed document from an uploaded JSON file."""
    content = uploaded_file.read().decode("utf-8")
    return document_from_dict(json.loads(content))


def draw_graph_visualization(original: DependencyGraph, canonical: DependencyGraph):
    """Draw the cleaned parse next to its coreference-canonicalized copy."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))

    for ax, graph, title in ((axes[0], original, "Original Parse"),
                             (axes[1], canonical, "Coreference-Canonicalized Parse")):
        ax.set_title(title, fontsize=14, fontweight='bold')
        G = graph.to_networkx()
        if len(G.nodes) > 0:
            # left-to-right in sentence order, roots on top
            order = list(G.nodes)
            depths = {}
            for root in graph.roots:
                for node, depth in nx.single_source_shortest_path_length(G, root).items():
                    depths[node] = min(depth, depths.get(node, depth))
            pos = {n: (i, -depths.get(n, 0)) for i, n in enumerate(order)}

            root_nodes = [n for n, d in G.nodes(data=True) if d.get("root")]
            nx.draw_networkx_nodes(G, pos, ax=ax, node_color='lightblue', node_size=900, alpha=0.7)
            if root_nodes:
                nx.draw_networkx_nodes(G, pos, nodelist=root_nodes, ax=ax,
                                       node_color='yellow', node_size=1000, alpha=0.8)
            nx.draw_networkx_edges(G, pos, ax=ax, arrows=True, alpha=0.6, edge_color='gray')
            labels = {n: d["label"] for n, d in G.nodes(data=True)}
            nx.draw_networkx_labels(G, pos, labels, ax=ax, font_size=10, font_weight='bold')
            edge_labels = {(u, v): d["label"] for u, v, d in G.edges(data=True)}
            nx.draw_networkx_edge_labels(G, pos, edge_labels, ax=ax, font_size=8)
        ax.axis('off')

    plt.tight_layout()

    # Convert plot to image for Streamlit
    buf = io.BytesIO()
    plt.savefig(buf, format='png', dpi=150, bbox_inches='tight')
    buf.seek(0)
    plt.close()

    return buf


def create_sidebar_controls():
    """Create sidebar controls for the extractor configuration."""
    st.sidebar.header("Parameters")
    threshold = st.sidebar.slider(
        "Splitter threshold",
        min_value=0.0,
        max_value=1.0,
        value=0.1,
        step=0.05,
        help="Minimum score for a clause to be kept"
    )
    budget = st.sidebar.number_input(
        "Max entailments per clause",
        min_value=0,
        max_value=10000,
        value=1000,
        step=100,
    )
    strict = st.sidebar.checkbox("Strict triples", value=True,
                                 help="Only produce a triple when it consumes the whole fragment")
    all_nominals = st.sidebar.checkbox("All nominal relations", value=False)
    resolve_coref = st.sidebar.checkbox("Resolve coreference", value=True)
    fmt = st.sidebar.selectbox("Output format", OUTPUT_FORMATS, index=0)

    st.sidebar.header("Debug Options")
    debug_mode = st.sidebar.checkbox("Enable Debug Mode", value=True, help="Show detailed pipeline steps")
    config = OpenIEConfig(
        splitter_threshold=threshold,
        entailments_per_sentence=int(budget),
        triple_strict=strict,
        triple_all_nominals=all_nominals,
        resolve_coref=resolve_coref,
        output_format=fmt,
    )
    return config, debug_mode


def debug_pipeline(document, config: OpenIEConfig):
    """Run the extractor sentence by sentence, showing every step."""
    openie = OpenIE(config)

    # Step 1: Canonical mentions
    st.header("Step 1: Canonical Mentions")
    with st.expander("Coreference Details", expanded=True):
        mention_map = openie.canonical_mentions(document)
        st.metric("Coreference Chains", len(document.coref_chains))
        if mention_map:
            rows = []
            for (sent_idx, tok_idx), mention in sorted(mention_map.items()):
                token = document.sentences[sent_idx].tokens[tok_idx - 1]
                rows.append({
                    "Sentence #": sent_idx + 1,
                    "Token": f"{token.word}-{tok_idx}",
                    "Canonical Mention": " ".join(t.word for t in mention),
                })
            st.dataframe(pd.DataFrame(rows), use_container_width=True)
        else:
            st.info("No pronouns to resolve")

    # Step 2: Per-sentence extraction
    st.header("Step 2: Sentence Extraction")
    for sentence in document.sentences:
        with st.expander(f"Sentence {sentence.index + 1}: {sentence.text[:60]}", expanded=False):
            openie.annotate_sentence(sentence, mention_map)
            graph = sentence.collapsed_graph if sentence.collapsed_graph is not None else sentence.basic_graph
            if graph is not None and len(sentence.tokens) >= 2:
                canonical = canonicalize_coref(graph, mention_map) if config.resolve_coref and mention_map else graph
                st.image(draw_graph_visualization(graph, canonical))

            fragments = sorted(sentence.entailed_sentences, key=lambda f: -f.score)
            st.subheader("Entailed Fragments")
            st.dataframe(pd.DataFrame([{
                "Fragment": str(f),
                "Score": f"{f.score:.3f}",
                "Whole Sentence": "yes" if f.is_whole_sentence else "no",
            } for f in fragments]), use_container_width=True)

            st.subheader("Triples")
            st.dataframe(pd.DataFrame([{
                "Subject": t.subject_gloss,
                "Relation": t.relation_gloss,
                "Object": t.object_gloss,
                "Confidence": t.confidence_gloss,
            } for t in sentence.relation_triples]), use_container_width=True)

    return document


def show_confidence_stats(confidences: List[float]):
    if not confidences:
        st.warning("No extractions")
        return
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Triples", len(confidences))
    with col2:
        st.metric("Min Confidence", f"{np.min(confidences):.3f}")
    with col3:
        st.metric("Mean Confidence", f"{np.mean(confidences):.3f}")
    with col4:
        st.metric("Std Confidence", f"{np.std(confidences):.3f}")


def main():
    st.title("Natural Logic OpenIE")
    st.write("Upload a parsed document (JSON) to extract entailed fragments and relation triples")

    config, debug_mode = create_sidebar_controls()

    uploaded_file = st.file_uploader(
        "Choose a parsed document",
        type=['json'],
        help="Tokens, dependencies and coreference chains as JSON"
    )
    use_sample = st.checkbox("Use the sample document", value=uploaded_file is None)

    if uploaded_file is not None or use_sample:
        try:
            document = document_from_dict(SAMPLE_DOCUMENT) if use_sample else load_document_from_file(uploaded_file)
        except (ValueError, KeyError, json.JSONDecodeError) as e:
            st.error(f"Could not read document: {e}")
            return

        st.subheader("Sentences")
        st.dataframe(pd.DataFrame([{
            "Sentence #": s.index + 1,
            "Tokens": len(s.tokens),
            "Text": s.text,
        } for s in document.sentences]), use_container_width=True)

        if st.button("Extract", type="primary"):
            try:
                if debug_mode:
                    st.markdown("---")
                    st.title("Pipeline Debug Mode")
                    document = debug_pipeline(document, config)
                else:
                    with st.spinner("Extracting..."):
                        document = OpenIE(config).annotate(document)

                st.markdown("---")
                st.header("Extractions")
                st.dataframe(triples_frame(document), use_container_width=True)
                st.code("\n".join(format_document(document, config.output_format)) or "(none)", language=None)
                with st.expander("All Entailed Fragments", expanded=False):
                    st.dataframe(fragments_frame(document), use_container_width=True)

                show_confidence_stats([t.confidence for s in document.sentences for t in s.relation_triples])
            except Exception as e:
                st.error(f"Error running extraction: {str(e)}")
                st.exception(e)


if __name__ == "__main__":
    main()
