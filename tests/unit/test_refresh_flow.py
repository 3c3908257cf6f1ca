# ABOUTME: Unit tests for the refresh flow: fetch, edit/abort prompt, and manual fallback.
# ABOUTME: Uses a fake enrichment source and scripted prompt answers.

from collections.abc import Sequence

import pytest

from shelfwise.errors import ConflictUnresolved, ExternalServiceError, MergeAborted
from shelfwise.metadata.merger import MERGE_FIELDS, DiffRow
from shelfwise.metadata.provider import EnrichmentSource, SearchResults
from shelfwise.metadata.refresh import MAX_INVALID_CHOICES, choose_action, refresh_metadata
from shelfwise.metadata.types import MetadataRecord


class FakeSource:
    """Enrichment source returning a fixed record, or failing."""

    def __init__(self, record: MetadataRecord | None = None) -> None:
        self._record = record
        self.requested: list[tuple[str, str | None]] = []

    @property
    def name(self) -> str:
        return "fake"

    def search(self, author: str, title: str) -> SearchResults:
        return SearchResults()

    def find_id(self, record: MetadataRecord) -> str:
        if self._record is None:
            raise ExternalServiceError("nothing found")
        return "/works/OL1W"

    def get_record(self, source_id: str, isbn: str | None = None) -> MetadataRecord:
        self.requested.append((source_id, isbn))
        assert self._record is not None
        return self._record


class FirstOptionResolver:
    def __init__(self) -> None:
        self.fields: list[str] = []

    def resolve(
        self,
        field: str,
        label: str,
        usage: str,
        options: Sequence[str],
        allow_free_text: bool,
    ) -> str:
        self.fields.append(field)
        return options[0]


class ScriptedPrompt:
    """Returns the scripted answers in order, repeating the last one."""

    def __init__(self, *answers: str) -> None:
        self._answers = list(answers)
        self.calls = 0

    def __call__(
        self, local: MetadataRecord, online: MetadataRecord, rows: list[DiffRow]
    ) -> str:
        self.calls += 1
        if len(self._answers) > 1:
            return self._answers.pop(0)
        return self._answers[0]


LOCAL = MetadataRecord(title="Dune", authors=("Frank Herbert",), isbn="9780441013593")
ONLINE = MetadataRecord(
    title="Dune", authors=("Frank Herbert",), year="1965", publisher="Chilton Books"
)


class TestChooseAction:
    """Tests for the bounded edit/abort prompt."""

    def test_tolerates_ten_invalid_answers(self) -> None:
        prompt = ScriptedPrompt(*(["x"] * MAX_INVALID_CHOICES), "E")
        assert choose_action(LOCAL, ONLINE, prompt) == "e"
        assert prompt.calls == MAX_INVALID_CHOICES + 1

    def test_eleventh_invalid_answer_aborts(self) -> None:
        prompt = ScriptedPrompt("maybe")
        with pytest.raises(ConflictUnresolved):
            choose_action(LOCAL, ONLINE, prompt)
        assert prompt.calls == MAX_INVALID_CHOICES + 1


class TestRefreshMetadata:
    """Tests for refresh_metadata."""

    def test_fake_source_satisfies_protocol(self) -> None:
        assert isinstance(FakeSource(), EnrichmentSource)

    def test_edit_reconciles_with_online_record(self) -> None:
        source = FakeSource(ONLINE)
        resolver = FirstOptionResolver()
        result = refresh_metadata(LOCAL, source, resolver, prompt=ScriptedPrompt("e"))
        assert resolver.fields == list(MERGE_FIELDS)
        assert source.requested == [("/works/OL1W", "9780441013593")]
        # Local had no publisher, so the online one is the first option.
        assert result.publisher == "Chilton Books"

    def test_edit_selected_fields(self) -> None:
        resolver = FirstOptionResolver()
        refresh_metadata(
            LOCAL, FakeSource(ONLINE), resolver, prompt=ScriptedPrompt("e"), fields=["year"]
        )
        assert resolver.fields == ["year"]

    def test_abort(self) -> None:
        with pytest.raises(MergeAborted):
            refresh_metadata(
                LOCAL, FakeSource(ONLINE), FirstOptionResolver(), prompt=ScriptedPrompt("a")
            )

    def test_unavailable_source_falls_back_to_manual_review(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Every field is reviewed against an empty record; the prompt is skipped."""
        prompt = ScriptedPrompt("a")
        resolver = FirstOptionResolver()
        result = refresh_metadata(LOCAL, FakeSource(None), resolver, prompt=prompt)
        assert prompt.calls == 0
        assert resolver.fields == list(MERGE_FIELDS)
        assert result.title == "Dune"
        assert result.isbn == "9780441013593"
        assert "Could not retrieve information from fake" in caplog.text
