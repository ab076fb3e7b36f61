"""Tests for domain records: ratings, identifiers and lazy caches."""

import threading
import time

import pytest

from furscrape.models import (
    UNPARSED_ID,
    Journal,
    OnceCell,
    Rating,
    Submission,
    SubmissionDetails,
    normalize_page,
    parse_submission_id,
)


class TestRating:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("general", Rating.GENERAL),
            ("r-general", Rating.GENERAL),
            ("r-mature", Rating.MATURE),
            ("r-adult t-image u-bob", Rating.ADULT),
            ("t-image r-mature", Rating.MATURE),
            ("", None),
            (None, None),
            ("r-unknown", None),
        ],
    )
    def test_parse(self, token, expected):
        assert Rating.parse(token) is expected

    def test_json_and_class_tokens_agree(self):
        assert Rating.parse("r-adult") is Rating.parse("r-adult t-image")


class TestSubmissionId:
    @pytest.mark.parametrize("raw, expected", [("sid-42", 42), ("sid-0", 0), ("sid-123456789", 123456789)])
    def test_valid(self, raw, expected):
        assert parse_submission_id(raw) == expected

    @pytest.mark.parametrize("raw", ["", "42", "sid-", "sid-4x", "id-42", "sid--1"])
    def test_invalid_yields_sentinel(self, raw):
        assert parse_submission_id(raw) == UNPARSED_ID


class TestNormalizePage:
    @pytest.mark.parametrize("page, expected", [(0, 1), (-3, 1), (1, 1), (7, 7)])
    def test_normalize(self, page, expected):
        assert normalize_page(page) == expected


class TestOnceCell:
    def test_factory_runs_once(self):
        cell = OnceCell()
        calls = []

        def factory():
            calls.append(1)
            return "value"

        assert cell.get_or_init(factory) == "value"
        assert cell.get_or_init(factory) == "value"
        assert calls == [1]
        assert cell.is_set

    def test_concurrent_first_access(self):
        cell = OnceCell()
        calls = []

        def factory():
            calls.append(1)
            time.sleep(0.05)
            return len(calls)

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(cell.get_or_init(factory)))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert calls == [1]
        assert results == [1] * 8

    def test_failed_factory_leaves_cell_empty(self):
        cell = OnceCell()

        def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cell.get_or_init(boom)
        assert not cell.is_set
        assert cell.get_or_init(lambda: 5) == 5


class TestSubmissionPreview:
    def test_prefers_large_preview(self, client, session):
        session.add("https://t.facdn.net/7@400-99.jpg", content_type="image/jpeg", content=b"large")
        sub = Submission(client, 7, "https://t.facdn.net/7@200-99.jpg", Rating.GENERAL, "T", "u")
        assert sub.preview_image() == b"large"
        assert sub.preview_image() == b"large"
        assert len(session.calls) == 1

    def test_falls_back_to_listed_size(self, client, session):
        session.add("https://t.facdn.net/7@200-99.jpg", content_type="image/jpeg", content=b"small")
        sub = Submission(client, 7, "https://t.facdn.net/7@200-99.jpg", Rating.GENERAL, "T", "u")
        assert sub.preview_image() == b"small"
        assert [c["url"] for c in session.calls] == [
            "https://t.facdn.net/7@400-99.jpg",
            "https://t.facdn.net/7@200-99.jpg",
        ]

    def test_already_large_is_fetched_directly(self, client, session):
        session.add("https://t.facdn.net/7@400-99.jpg", content_type="image/jpeg", content=b"large")
        sub = Submission(client, 7, "https://t.facdn.net/7@400-99.jpg", None, "T", "u")
        assert sub.preview_image() == b"large"
        assert len(session.calls) == 1

    def test_cache_is_per_instance(self, client, session):
        session.add("https://example/x.jpg", content_type="image/jpeg", content=b"x")
        first = Submission(client, 1, "https://example/x.jpg", None, "T", "u")
        second = Submission(client, 1, "https://example/x.jpg", None, "T", "u")
        first.preview_image()
        second.preview_image()
        assert len(session.calls) == 2
        assert first == second


class TestLazyRecords:
    def test_journal_content_cached(self, client, session):
        session.add(
            "https://www.furaffinity.net/journal/5/",
            '<span class="popup_date">Jan 1</span><div class="journal-body">Body</div>',
        )
        journal = Journal(client, 5, "Title", "user")
        assert journal.content() == "Jan 1\n\nBody"
        assert journal.content() == "Jan 1\n\nBody"
        assert len(session.calls) == 1
        assert journal.url == "https://www.furaffinity.net/journal/5/"

    def test_download_cached(self, client, session):
        session.add("https://d.facdn.net/f.png", content_type="image/png", content=b"png")
        details = SubmissionDetails(client, 1, "https://d.facdn.net/f.png", "", "")
        assert details.download() == b"png"
        assert details.download() == b"png"
        assert len(session.calls) == 1

    def test_download_without_link(self, client):
        details = SubmissionDetails(client, 1, "", "", "")
        with pytest.raises(ValueError):
            details.download()
