"""Interactive terminal session.

Two inputs share the screen: submitting the document input adds a document
and rebuilds the index; every change in the query input re-runs the search.
Tab cycles focus between the inputs and the result list. Highlighting a
result shows its body and the tokens the index produced for it.
"""

from __future__ import annotations

import logging

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widgets import Footer, Input, Label, ListItem, ListView, Static

from ja_search_repro.domain.model import DocumentStore
from ja_search_repro.domain.search import SearchOutcome
from ja_search_repro.session import IndexSession


logger = logging.getLogger(__name__)

HELP_TEXT = "Use tab to move around and press Enter to select or confirm."
DOCUMENT_PLACEHOLDER = "Enter or paste a Japanese string and press Enter…"
QUERY_PLACEHOLDER = "Enter search query…"


class SearchReproApp(App[None]):
    """Document entry, live query box and ranked results."""

    TITLE = "ja-search-repro"

    CSS = """
    .field-row {
        height: auto;
    }
    .field-label {
        width: 20;
        padding: 1 1 0 0;
    }
    #status, #query-summary {
        padding: 0 1;
    }
    #status.error {
        color: $error;
    }
    #results {
        height: auto;
        max-height: 12;
        margin-top: 1;
    }
    #result-detail {
        padding: 1 2;
    }
    """

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    documents: reactive[DocumentStore] = reactive(DocumentStore.empty, init=False)
    query_text: reactive[str] = reactive("", init=False)

    def __init__(self, session: IndexSession | None = None, documents: DocumentStore | None = None) -> None:
        super().__init__()
        self.session = session or IndexSession()
        self._initial_documents = documents
        self.outcome: SearchOutcome = SearchOutcome.unfiltered("", 0)
        self.detail_tokens: list[str] = []

    def compose(self) -> ComposeResult:
        yield Static(HELP_TEXT, id="help")
        with Horizontal(classes="field-row"):
            yield Label("Index a document", classes="field-label")
            yield Input(placeholder=DOCUMENT_PLACEHOLDER, id="document-input")
        with Horizontal(classes="field-row"):
            yield Label("Search documents", classes="field-label")
            yield Input(placeholder=QUERY_PLACEHOLDER, id="query-input")
        yield Static(id="status")
        yield Static(id="query-summary")
        yield ListView(id="results")
        yield Static(id="result-detail")
        yield Footer()

    async def on_mount(self) -> None:
        self.query_one("#document-input", Input).focus()
        if self._initial_documents is not None:
            self.documents = self._initial_documents
        else:
            await self._refresh_results()

    @on(Input.Submitted, "#document-input")
    def _add_document(self, event: Input.Submitted) -> None:
        body = event.value
        event.input.value = ""
        if not body.strip():
            return
        self.documents = self.documents.add(body)
        logger.debug("Document added", extra={"documents": len(self.documents)})

    @on(Input.Changed, "#query-input")
    def _update_query(self, event: Input.Changed) -> None:
        self.query_text = event.value

    async def watch_documents(self, documents: DocumentStore) -> None:
        self.session.rebuild(documents)
        await self._refresh_results()

    async def watch_query_text(self, query_text: str) -> None:
        await self._refresh_results()

    async def _refresh_results(self) -> None:
        outcome = self.session.search(self.query_text)
        self.outcome = outcome

        status = self.query_one("#status", Static)
        if outcome.error:
            status.update(Text(f"{outcome.summary()}\nError searching: {outcome.error}"))
            status.add_class("error")
        else:
            status.update(outcome.summary())
            status.remove_class("error")

        summary = Text()
        if outcome.is_filtered and not outcome.error:
            summary.append("Query: ", style="bold")
            summary.append(outcome.query)
            if outcome.tokens:
                summary.append("\nTokens: ", style="bold")
                summary.append(", ".join(outcome.tokens))
        self.query_one("#query-summary", Static).update(summary)

        results = self.query_one("#results", ListView)
        await results.clear()
        if outcome.results:
            await results.extend(
                ListItem(Label(Text(hit.document_id)), name=hit.document_id) for hit in outcome.results
            )
        self._show_detail(None)

    @on(ListView.Highlighted, "#results")
    def _highlight_result(self, event: ListView.Highlighted) -> None:
        self._show_detail(event.item.name if event.item is not None else None)

    def _show_detail(self, document_id: str | None) -> None:
        detail = self.query_one("#result-detail", Static)
        if document_id is None or document_id not in self.documents:
            self.detail_tokens = []
            detail.update("")
            return

        body = self.documents[document_id]
        self.detail_tokens = self.session.tokenize(body)
        text = Text()
        text.append(document_id, style="reverse")
        text.append(f"  {body}")
        if self.detail_tokens:
            text.append("\n\nDocument Tokens:\n", style="bold")
            text.append(", ".join(self.detail_tokens))
        detail.update(text)
