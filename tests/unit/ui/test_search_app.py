"""Tests for the terminal UI, driven through textual's pilot."""

import pytest
from textual.widgets import Input, ListView

from ja_search_repro.domain.model import DocumentStore
from ja_search_repro.session import IndexSession
from ja_search_repro.ui.app import DOCUMENT_PLACEHOLDER, QUERY_PLACEHOLDER, SearchReproApp


@pytest.fixture
def app(ngram_settings):
    return SearchReproApp(IndexSession(ngram_settings))


async def _add_document(app, pilot, body):
    document_input = app.query_one("#document-input", Input)
    document_input.focus()
    document_input.value = body
    await pilot.press("enter")
    await pilot.pause()


async def _type_query(app, pilot, text):
    app.query_one("#query-input", Input).value = text
    await pilot.pause()
    await pilot.pause()


@pytest.mark.asyncio
async def test_initial_screen(app):
    async with app.run_test() as pilot:
        await pilot.pause()

        assert app.focused is app.query_one("#document-input", Input)
        assert app.query_one("#document-input", Input).placeholder == DOCUMENT_PLACEHOLDER
        assert app.query_one("#query-input", Input).placeholder == QUERY_PLACEHOLDER
        assert app.outcome.summary() == "0 documents indexed"


@pytest.mark.asyncio
async def test_submitting_a_document_indexes_it(app):
    async with app.run_test() as pilot:
        await _add_document(app, pilot, "東京タワー")

        assert app.query_one("#document-input", Input).value == ""
        assert dict(app.documents) == {"Document 1": "東京タワー"}
        assert app.session.documents is app.documents
        assert app.outcome.summary() == "1 document indexed"


@pytest.mark.asyncio
async def test_blank_submission_is_ignored(app):
    async with app.run_test() as pilot:
        await pilot.pause()
        rebuilds = app.session.rebuild_count

        await _add_document(app, pilot, "   ")

        assert len(app.documents) == 0
        assert app.session.rebuild_count == rebuilds


@pytest.mark.asyncio
async def test_query_updates_results_live(app):
    async with app.run_test() as pilot:
        await _add_document(app, pilot, "東京タワー")
        await _add_document(app, pilot, "大阪城")

        await _type_query(app, pilot, "大阪")

        assert app.outcome.document_ids == ["Document 2"]
        assert app.outcome.tokens == ["大", "阪", "大阪"]
        assert len(app.query_one("#results", ListView).children) == 1

        await _type_query(app, pilot, "")

        assert not app.outcome.is_filtered
        assert len(app.query_one("#results", ListView).children) == 0


@pytest.mark.asyncio
async def test_new_document_refreshes_current_query(app):
    async with app.run_test() as pilot:
        await _type_query(app, pilot, "東京")
        assert app.outcome.result_count == 0

        await _add_document(app, pilot, "東京駅")

        assert app.outcome.document_ids == ["Document 1"]


@pytest.mark.asyncio
async def test_highlighting_a_result_shows_its_tokens(app):
    async with app.run_test() as pilot:
        await _add_document(app, pilot, "東京")
        await _type_query(app, pilot, "東京")

        results = app.query_one("#results", ListView)
        results.focus()
        results.index = None
        results.index = 0
        await pilot.pause()

        assert app.detail_tokens == ["東", "京", "東京"]


@pytest.mark.asyncio
async def test_query_errors_are_shown(app):
    async with app.run_test() as pilot:
        await _add_document(app, pilot, "東京")

        await _type_query(app, pilot, "foo:bar")

        assert "unrecognised field 'foo'" in app.outcome.error
        assert app.query_one("#status").has_class("error")
        assert len(app.query_one("#results", ListView).children) == 0


@pytest.mark.asyncio
async def test_starts_with_initial_documents(ngram_settings):
    store = DocumentStore.empty().add("東京").add("大阪")
    app = SearchReproApp(IndexSession(ngram_settings), documents=store)

    async with app.run_test() as pilot:
        await pilot.pause()

        assert app.session.documents is store
        assert app.outcome.summary() == "2 documents indexed"
