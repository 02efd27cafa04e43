"""
Tests for the Streamlit page, run headless through streamlit's AppTest.
"""
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from paper_digest.data.fetcher import Document

APP_PATH = str(Path(__file__).parents[1] / "app.py")

ENV_VARS = [
    "ARTICLES_BASE_URL", "CHUNK_LIMIT", "LLM_PROVIDER", "LLM_MODEL", "OPENAI_API_KEY",
    "OPENROUTER_API_KEY", "GOOGLE_API_KEY", "OLLAMA_BASE_URL", "OLLAMA_HOST",
    "REQUEST_TIMEOUT", "LOG_LEVEL",
]


@pytest.fixture
def app_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    monkeypatch.setenv("LLM_PROVIDER", "dummy-local")


def saved_entry(doc_id: str, title: str) -> dict:
    doc = Document(id=doc_id, text=f"{title}\nBody of {doc_id}.", title=title)
    return {"document": doc, "excerpt": f"Body of {doc_id}."}


def test_bad_configuration_is_shown_as_error(app_env, monkeypatch):
    monkeypatch.setenv("CHUNK_LIMIT", "0")

    at = AppTest.from_file(APP_PATH, default_timeout=30).run()

    assert not at.exception
    assert "Invalid configuration" in at.error[0].value
    assert "CHUNK_LIMIT" in at.error[0].value


def test_saved_item_shows_excerpt_and_opens(app_env):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.session_state["saved"] = [saved_entry("paper-1", "First paper"), saved_entry("paper-2", "Second paper")]
    at.run()

    assert "Body of paper-1." in [c.value for c in at.sidebar.caption]

    at.button(key="open_saved_paper-2").click().run()

    assert not at.exception
    assert at.session_state["doc"].id == "paper-2"
    assert "Second paper" in [h.value for h in at.header]


def test_saved_item_can_be_removed(app_env):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.session_state["saved"] = [saved_entry("paper-1", "First paper"), saved_entry("paper-2", "Second paper")]
    at.run()

    at.button(key="remove_saved_paper-1").click().run()

    assert not at.exception
    assert [s["document"].id for s in at.session_state["saved"]] == ["paper-2"]
    with pytest.raises(KeyError):
        at.button(key="remove_saved_paper-1")
