"""
Unit tests for the SearchRequest data model.
"""

import pytest
from pathlib import Path
from pydantic import ValidationError
from fetchlog.models.search_request import SearchRequest, normalize_extension, split_list_value


class TestSearchRequest:
    """Test cases for SearchRequest."""

    def test_basic_request_creation(self):
        """Test creating a request with defaults."""
        request = SearchRequest(roots=["/data/logs"])

        assert request.roots == (str(Path("/data/logs").absolute()),)
        assert request.recursive is True
        assert request.search_in_archives is True
        assert request.case_sensitive is False
        assert request.extensions == ()
        assert request.include_patterns == ()
        assert request.exclude_patterns == ()
        assert request.content_filter is None
        assert not request.has_extension_filter()
        assert not request.has_content_filter()

    def test_extension_normalization(self):
        """Test that extensions get a leading dot and lowercase."""
        request = SearchRequest(roots=["/data"], extensions=["LOG", " .Txt ", "json"])

        assert request.extensions == (".log", ".txt", ".json")
        assert request.has_extension_filter()

    def test_extensions_from_separated_string(self):
        """Test comma and semicolon separated extension input."""
        request = SearchRequest(roots=["/data"], extensions="log; .CSV,,xml")

        assert request.extensions == (".log", ".csv", ".xml")

    def test_duplicate_extensions_removed(self):
        """Test that duplicate extensions collapse after normalization."""
        request = SearchRequest(roots=["/data"], extensions=[".log", "LOG", "log"])

        assert request.extensions == (".log",)

    def test_patterns_keep_order(self):
        """Test that include and exclude patterns keep their order."""
        request = SearchRequest(
            roots=["/data"],
            include_patterns=["*.cfg", " app?.ini "],
            exclude_patterns="temp_*;*.bak"
        )

        assert request.include_patterns == ("*.cfg", "app?.ini")
        assert request.exclude_patterns == ("temp_*", "*.bak")

    def test_list_patterns_not_split(self):
        """List items are patterns as given, separators included."""
        request = SearchRequest(roots=["/data"], include_patterns=["a,b.txt", "c;d.log"])

        assert request.include_patterns == ("a,b.txt", "c;d.log")

    def test_blank_content_filter_is_none(self):
        """Test that whitespace-only content filters are dropped."""
        assert SearchRequest(roots=["/data"], content_filter="   ").content_filter is None
        assert SearchRequest(roots=["/data"], content_filter="").content_filter is None

    def test_content_filter_kept_verbatim(self):
        """Test that a real content filter is not altered."""
        request = SearchRequest(roots=["/data"], content_filter=" ERROR ")

        assert request.content_filter == " ERROR "
        assert request.has_content_filter()

    def test_roots_required(self):
        """Test that at least one root is needed."""
        with pytest.raises(ValidationError):
            SearchRequest(roots=[])

        with pytest.raises(ValidationError):
            SearchRequest(roots=["", "   "])

    def test_duplicate_roots_removed(self):
        """Test that repeated roots are only walked once."""
        request = SearchRequest(roots=["/data", "/data", "/other"])

        assert len(request.roots) == 2

    def test_single_root_string(self):
        """Test passing a single root as a string."""
        request = SearchRequest(roots="/data")

        assert len(request.roots) == 1

    def test_output_path_expanded(self):
        """Test that the output path expands the user directory."""
        request = SearchRequest(roots=["/data"], output_path="~/staging")

        assert request.output_path == str(Path("~/staging").expanduser())

    def test_request_is_immutable(self):
        """Test that requests cannot be modified after creation."""
        request = SearchRequest(roots=["/data"])

        with pytest.raises(ValidationError):
            request.recursive = False

    def test_dict_round_trip(self):
        """Test conversion to and from a dictionary."""
        request = SearchRequest(roots=["/data"], extensions=["log"], content_filter="ERROR")
        data = request.to_dict()

        assert data['extensions'] == ['.log']
        assert SearchRequest.from_dict(data) == request

    def test_string_representation(self):
        """Test the summary string."""
        request = SearchRequest(roots=["/a", "/b"], extensions=["log"], recursive=False)
        text = str(request)

        assert "Roots: 2 directories" in text
        assert ".log" in text
        assert "Top level only" in text


class TestListHelpers:
    """Test cases for the list parsing helpers."""

    def test_split_list_value(self):
        assert split_list_value("a, b;c") == ["a", "b", "c"]
        assert split_list_value(["a,b", " c ", " "]) == ["a,b", "c"]
        assert split_list_value(None) == []

    def test_split_list_value_rejects_non_strings(self):
        with pytest.raises(ValueError):
            split_list_value([1, 2])

    def test_normalize_extension(self):
        assert normalize_extension("LOG") == ".log"
        assert normalize_extension(".Md") == ".md"
