"""
Unit tests for the search-and-export engine.

Covers the end-to-end scenarios, archive routing, cancellation semantics and
error wrapping of SearchEngine.
"""

import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from fetchlog.engine import SearchEngine
from fetchlog.errors import (
    ExportCancelledError,
    ExportError,
    OperationCancelledError,
    SearchCancelledError,
    SearchError,
)
from fetchlog.models.config import FetchLogConfig
from fetchlog.models.match_record import MatchOrigin
from fetchlog.models.search_request import SearchRequest
from fetchlog.tools.cancellation import CancellationToken


class TestSearchEngine:
    """Test cases for SearchEngine.search."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self.engine = SearchEngine()
        self.messages = []

    def teardown_method(self):
        """Clean up test fixtures."""
        self.engine.shutdown()
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write(self, relative: str, content) -> Path:
        path = self.test_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    def _zip(self, relative: str, entries: dict) -> Path:
        path = self.test_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, 'w') as archive:
            for name, data in entries.items():
                archive.writestr(name, data)
        return path

    def _request(self, **kwargs) -> SearchRequest:
        return SearchRequest(roots=[str(self.test_root)], **kwargs)

    def test_log_content_scenario(self):
        """Recursive .log search for ERROR, ignoring case."""
        self._write("a.log", "ERROR: x")
        self._write("b.log", "ok")
        self._write("sub/c.log", "error: y")

        request = self._request(extensions=[".log"], content_filter="ERROR", case_sensitive=False)
        records = self.engine.search(request, self.messages.append)

        assert sorted(r.display_name for r in records) == ["a.log", "c.log"]
        assert all(r.origin == MatchOrigin.PLAIN_FILE for r in records)
        assert f"Searching in: {self.test_root}" in self.messages
        assert "Match found: a.log" in self.messages

    def test_archive_scenario(self):
        """A matching archive yields one record for the archive itself."""
        path = self._zip("r.zip", {"ok.txt": "no match", "hit.txt": "ERROR"})

        records = self.engine.search(self._request(content_filter="ERROR"), self.messages.append)

        assert len(records) == 1
        record = records[0]
        assert record.display_name == "r.zip"
        assert record.origin == MatchOrigin.ARCHIVE_CONTAINER
        assert record.container_path == str(path)
        assert record.source_path == str(path)
        assert record.size_bytes == path.stat().st_size
        assert "Found matches in ZIP: r.zip" in self.messages

    def test_pattern_scenario(self):
        """Include *.cfg, exclude temp_*."""
        for name in ("a.cfg", "temp_b.cfg", "c.txt"):
            self._write(name, "x")

        records = self.engine.search(self._request(include_patterns=["*.cfg"], exclude_patterns=["temp_*"]))

        assert [r.display_name for r in records] == ["a.cfg"]

    def test_pattern_with_comma(self):
        self._write("a,b.txt", "x")
        self._write("a", "x")

        records = self.engine.search(self._request(include_patterns=["a,b.txt"]))

        assert [r.display_name for r in records] == ["a,b.txt"]

    def test_unmatched_archive_absent_even_if_name_matches(self):
        self._zip("logs.zip", {"readme.md": "nothing"})

        records = self.engine.search(self._request(extensions=[".zip"]))

        assert records == ()

    def test_archive_as_plain_file_when_disabled(self):
        """With archive search off, zips go through the plain file checks."""
        self._zip("logs.zip", {"readme.md": "nothing"})

        records = self.engine.search(self._request(extensions=[".zip"], search_in_archives=False))

        assert len(records) == 1
        assert records[0].origin == MatchOrigin.PLAIN_FILE

    def test_uppercase_zip_extension_routed_to_scanner(self):
        self._zip("LOGS.ZIP", {"a.txt": "ERROR"})

        records = self.engine.search(self._request(content_filter="ERROR"))

        assert len(records) == 1
        assert records[0].origin == MatchOrigin.ARCHIVE_CONTAINER

    def test_corrupt_archive_does_not_abort(self):
        self._write("broken.zip", b"garbage")
        self._write("a.log", "ERROR")

        records = self.engine.search(self._request(content_filter="ERROR"))

        assert [r.display_name for r in records] == ["a.log"]
        assert self.engine.get_stats()['archives_unreadable'] == 1

    def test_binary_file_not_content_matched(self):
        self._write("dump.dat", b"\x00" + b"ERROR")

        assert self.engine.search(self._request(content_filter="ERROR")) == ()

    def test_non_recursive(self):
        self._write("a.log", "x")
        self._write("sub/c.log", "x")

        records = self.engine.search(self._request(recursive=False))

        assert [r.display_name for r in records] == ["a.log"]

    def test_missing_root_is_not_fatal(self):
        self._write("a.log", "x")
        missing = str(self.test_root / "missing")
        request = SearchRequest(roots=[missing, str(self.test_root)])

        records = self.engine.search(request, self.messages.append)

        assert len(records) == 1
        assert f"Directory not found: {missing}" in self.messages
        assert self.engine.get_stats()['roots_missing'] == 1

    def test_overlapping_roots_report_each_match_once(self):
        self._write("sub/x.log", "x")
        self._zip("sub/r.zip", {"a.txt": "x"})
        request = SearchRequest(roots=[str(self.test_root), str(self.test_root / "sub")])

        records = self.engine.search(request, self.messages.append)

        assert sorted(r.display_name for r in records) == ["r.zip", "x.log"]
        assert self.messages.count("Match found: x.log") == 1

    def test_results_are_immutable_sequence(self):
        self._write("a.log", "x")

        assert isinstance(self.engine.search(self._request()), tuple)

    def test_cancel_before_start(self):
        """A pre-set signal is a cancelled outcome, not an empty result."""
        token = CancellationToken()
        token.cancel()

        with pytest.raises(SearchCancelledError):
            self.engine.search(self._request(), cancel=token)

    def test_cancel_with_empty_root_is_still_cancelled(self):
        token = CancellationToken()
        token.cancel()
        request = SearchRequest(roots=[str(self.test_root / "missing")])

        with pytest.raises(SearchCancelledError):
            self.engine.search(request, cancel=token)

    def test_cancel_midway_discards_partial_results(self):
        """Matches found before the signal are not returned."""
        for name in ("a.log", "b.log", "c.log"):
            self._write(name, "x")
        token = CancellationToken()

        def progress(message):
            if message.startswith("Match found"):
                token.cancel()

        with pytest.raises(SearchCancelledError) as exc_info:
            self.engine.search(self._request(), progress, token)

        assert isinstance(exc_info.value, OperationCancelledError)

    def test_unexpected_error_wrapped(self):
        self._write("a.log", "x")

        with patch("fetchlog.engine.Matcher.match_file", side_effect=ValueError("boom")):
            with pytest.raises(SearchError, match="boom"):
                self.engine.search(self._request())

    def test_file_vanishing_after_match_is_skipped(self):
        self._write("a.log", "x")

        with patch("fetchlog.tools.result_collector.MatchRecord") as record_cls:
            record_cls.for_file.side_effect = FileNotFoundError("gone")
            records = self.engine.search(self._request())

        assert records == ()
        assert self.engine.get_stats()['files_skipped'] == 1

    def test_stats(self):
        self._write("a.log", "x")
        self._zip("r.zip", {"b.txt": "x"})

        self.engine.search(self._request())
        stats = self.engine.get_stats()

        assert stats['files_scanned'] == 2
        assert stats['archives_scanned'] == 1
        assert stats['matches'] == 2
        assert stats['elapsed_seconds'] >= 0

    def test_custom_archive_extensions(self):
        """Configured archive extensions are routed to the scanner."""
        self._zip("bundle.jar", {"a.txt": "ERROR"})
        engine = SearchEngine(FetchLogConfig(archives={'extensions': ['zip', 'jar']}))

        records = engine.search(self._request(content_filter="ERROR"))

        assert len(records) == 1
        assert records[0].is_archive()

    def test_submit_search_runs_in_background(self):
        self._write("a.log", "x")

        future = self.engine.submit_search(self._request())

        assert [r.display_name for r in future.result(timeout=10)] == ["a.log"]


class TestSearchEngineExport:
    """Test cases for SearchEngine.export."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self.source = self.test_root / "source"
        self.source.mkdir()
        self.output = self.test_root / "out"
        self.engine = SearchEngine()

    def teardown_method(self):
        """Clean up test fixtures."""
        self.engine.shutdown()
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _search(self):
        return self.engine.search(SearchRequest(roots=[str(self.source)]))

    def test_search_then_export(self):
        (self.source / "a.log").write_text("a")
        (self.source / "sub").mkdir()
        (self.source / "sub" / "a.log").write_text("b")
        with zipfile.ZipFile(self.source / "r.zip", 'w') as archive:
            archive.writestr("hit.txt", "ERROR")

        records = self._search()
        messages = []
        copied = self.engine.export(records, self.output, messages.append)

        assert copied == 3
        assert sorted(os.listdir(self.output)) == ["a.log", "a_1.log", "r.zip"]
        assert len([m for m in messages if m.startswith("Copied: ")]) == 3
        assert self.engine.get_stats()['files_copied'] == 3

    def test_export_defaults_to_configured_output(self):
        (self.source / "a.log").write_text("a")
        engine = SearchEngine(FetchLogConfig(defaults={'output_path': str(self.output)}))

        copied = engine.export(engine.search(SearchRequest(roots=[str(self.source)])))

        assert copied == 1
        assert (self.output / "a.log").is_file()

    def test_export_cancelled(self):
        (self.source / "a.log").write_text("a")
        records = self._search()
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ExportCancelledError) as exc_info:
            self.engine.export(records, self.output, cancel=token)

        assert exc_info.value.copied_count == 0

    def test_output_not_creatable(self):
        """An output path that cannot be created aborts the export."""
        (self.source / "a.log").write_text("a")
        records = self._search()
        blocker = self.test_root / "file"
        blocker.write_text("x")

        with pytest.raises(ExportError):
            self.engine.export(records, blocker / "out")

    def test_submit_export(self):
        (self.source / "a.log").write_text("a")
        records = self._search()

        future = self.engine.submit_export(records, self.output)

        assert future.result(timeout=10) == 1

    def test_context_manager_shuts_down(self):
        with SearchEngine() as engine:
            engine.submit_search(SearchRequest(roots=[str(self.source)])).result(timeout=10)
            assert engine._executor is not None

        assert engine._executor is None
