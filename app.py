import asyncio

import pandas as pd
import streamlit as st

from paper_digest.config import PROVIDERS, load_settings
from paper_digest.data.fetcher import DocumentFetcher
from paper_digest.exceptions import ConfigurationError, DocumentFetchError
from paper_digest.logger import configure_logging
from paper_digest.methods.question_answer import EvidenceQA
from paper_digest.methods.summarize import MapReduceSummarizer
from paper_digest.models.llm_client import get_model, is_failure
from paper_digest.utils import chunk_text, count_tokens, make_excerpt

st.set_page_config(page_title="Paper Digest", page_icon="📄", layout="wide")
st.title("Paper Digest")

try:
    settings = load_settings()
except ConfigurationError as e:
    st.error(f"Invalid configuration: {e}")
    st.stop()
configure_logging(settings.log_level)

st.markdown(
    """
    Open an article by id, then summarize it or ask a question about it. Long articles are split into
    chunks, each chunk is sent to the model in order, and a final call merges the partial results.
    """
)

for key, default in (("doc", None), ("summary", ""), ("answer", ""), ("saved", []), ("traces", [])):
    if key not in st.session_state:
        st.session_state[key] = default

with st.sidebar:
    st.header("Model")
    provider = st.selectbox(
        "LLM Provider",
        list(PROVIDERS),
        index=list(PROVIDERS).index(settings.provider),
        help="Use dummy-local to try the app without an API key.",
        key="provider",
    )
    model_name = st.text_input(
        "Model name (blank for provider default)",
        value=settings.model_name or "",
        key="model_name",
    )
    chunk_limit = st.number_input(
        "Chunk limit (characters)", min_value=1, max_value=200000,
        value=settings.chunk_limit, step=500,
        help="Documents longer than this are summarized chunk by chunk.",
        key="chunk_limit",
    )

    st.header("Saved")
    if not st.session_state["saved"]:
        st.caption("No saved articles yet.")
    for item in list(st.session_state["saved"]):
        saved_doc = item["document"]
        st.markdown(f"**{saved_doc.title}**")
        st.caption(item["excerpt"])
        col_open, col_remove = st.columns(2)
        if col_open.button("Open", key=f"open_saved_{saved_doc.id}"):
            st.session_state.update({"doc": saved_doc, "summary": "", "answer": ""})
            st.rerun()
        if col_remove.button("Remove", key=f"remove_saved_{saved_doc.id}"):
            st.session_state["saved"] = [s for s in st.session_state["saved"] if s["document"].id != saved_doc.id]
            st.rerun()


def build_model():
    try:
        return get_model(provider, model_name or None, settings)
    except ConfigurationError as e:
        st.error(str(e))
        st.stop()


article_id = st.text_input("Article id", key="article_id", help="File name under the article base URL, with or without .txt")
if st.button("Open", key="open_btn") and article_id.strip():
    st.session_state.update({"summary": "", "answer": "", "doc": None})
    with st.spinner("Loading…"):
        try:
            fetcher = DocumentFetcher(settings.base_url, timeout=settings.request_timeout)
            st.session_state["doc"] = asyncio.run(fetcher.fetch(article_id.strip()))
        except DocumentFetchError as e:
            st.error(str(e))

doc = st.session_state["doc"]
if doc is not None:
    st.header(doc.title)
    if doc.source_url:
        st.markdown(f"[Source]({doc.source_url})")

    saved_ids = [s["document"].id for s in st.session_state["saved"]]
    if doc.id in saved_ids:
        if st.button("Remove from saved", key="unsave_btn"):
            st.session_state["saved"] = [s for s in st.session_state["saved"] if s["document"].id != doc.id]
            st.rerun()
    elif st.button("Save", key="save_btn"):
        st.session_state["saved"].append({"document": doc, "excerpt": make_excerpt(doc.text)})
        st.rerun()

    col_sum, col_ask = st.columns(2)
    with col_sum:
        if st.button("Summarize", key="summarize_btn", disabled=not doc.text):
            model = build_model()
            with st.spinner("Summarizing…"):
                result = asyncio.run(MapReduceSummarizer(model, int(chunk_limit)).summarize(doc.text))
            st.session_state["traces"] = model.traces
            if is_failure(result):
                st.error("Summarization failed: the model call did not succeed.")
                st.session_state["summary"] = ""
            else:
                st.session_state["summary"] = result
        if st.session_state["summary"]:
            st.info(st.session_state["summary"])

    with col_ask:
        question = st.text_input("Ask a question about this article", key="question")
        if st.button("Ask", key="ask_btn") and question.strip() and doc.text:
            model = build_model()
            with st.spinner("Reading…"):
                result = asyncio.run(EvidenceQA(model, int(chunk_limit)).answer(doc.text, question.strip()))
            st.session_state["traces"] = model.traces
            if is_failure(result):
                st.error("Answering failed: the model call did not succeed.")
                st.session_state["answer"] = ""
            else:
                st.session_state["answer"] = result
        if st.session_state["answer"]:
            st.success(st.session_state["answer"])

    with st.expander("Chunk plan & call log"):
        if len(doc.text) <= chunk_limit:
            st.caption(f"{len(doc.text)} chars: fits in a single call.")
        else:
            chunks = chunk_text(doc.text, int(chunk_limit))
            st.dataframe(pd.DataFrame([
                {"chunk": i + 1, "chars": len(c), "tokens≈": count_tokens(c)}
                for i, c in enumerate(chunks)
            ]))
        if st.session_state["traces"]:
            st.dataframe(pd.DataFrame(st.session_state["traces"]))

    with st.expander("Full text"):
        st.text(doc.text)

st.markdown("---")
st.markdown("**Tips:** Use `dummy-local` to test without calling an external LLM. When ready, switch providers and set API keys in `.env`.")
