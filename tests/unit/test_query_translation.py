# ABOUTME: Unit tests for translating the search query language into FTS5 expressions.
# ABOUTME: Covers field scoping, required/excluded clauses, phrases, prefixes and errors.

import pytest

from shelfwise.errors import QuerySyntaxError
from shelfwise.index.query import to_fts_query


class TestToFtsQuery:
    """Tests for to_fts_query."""

    def test_bare_terms_are_alternatives(self) -> None:
        assert to_fts_query("dune emma") == '"dune" OR "emma"'

    def test_field_scope(self) -> None:
        assert to_fts_query("author:herbert") == 'author : "herbert"'

    def test_field_names_are_case_insensitive(self) -> None:
        assert to_fts_query("Title:dune") == 'title : "dune"'

    def test_required_terms_replace_optional_ones(self) -> None:
        assert to_fts_query("+author:herbert dune +year:1965") == (
            'author : "herbert" AND year : "1965"'
        )

    def test_excluded_terms(self) -> None:
        assert to_fts_query("tags:fantasy -progress:read") == (
            '(tags : "fantasy") NOT (progress : "read")'
        )

    def test_quoted_phrase(self) -> None:
        assert to_fts_query('title:"name of the rose"') == 'title : "name of the rose"'

    def test_prefix(self) -> None:
        assert to_fts_query("herb*") == '"herb" *'

    def test_embedded_quotes_are_escaped(self) -> None:
        assert to_fts_query("""'say "hi"'""") == '"say ""hi"""'

    def test_only_exclusions_match_nothing(self) -> None:
        assert to_fts_query("-progress:read") is None
        assert to_fts_query("   ") is None

    def test_unknown_field(self) -> None:
        with pytest.raises(QuerySyntaxError, match="Unknown search field: colour"):
            to_fts_query("colour:blue")

    def test_unbalanced_quotes(self) -> None:
        with pytest.raises(QuerySyntaxError):
            to_fts_query('title:"unfinished')
