"""
tests/test_cache_and_signals.py — Request Cache and Invalidation Signal
========================================================================
"""

from __future__ import annotations

from flask import Flask

from hubthreads.cache import RequestCache, get_request_cache, memoized
from hubthreads.signals import revalidate_path


class TestRequestCache:

    def test_loader_runs_once_per_key(self):
        cache = RequestCache()
        calls = []

        def loader():
            calls.append(1)
            return "value"

        assert cache.fetch("k", loader) == "value"
        assert cache.fetch("k", loader) == "value"
        assert len(calls) == 1
        assert "k" in cache
        assert len(cache) == 1

    def test_clear(self):
        cache = RequestCache()
        cache.fetch("k", lambda: 1)
        cache.clear()
        assert len(cache) == 0

    def test_memoized_without_cache_always_loads(self):
        calls = []
        memoized(None, "k", lambda: calls.append(1))
        memoized(None, "k", lambda: calls.append(1))
        assert len(calls) == 2

    def test_scoped_to_request(self):
        app = Flask(__name__)

        with app.test_request_context():
            first = get_request_cache()
            assert get_request_cache() is first

        with app.test_request_context():
            assert get_request_cache() is not first


class TestRevalidatePath:

    def test_sends_path(self, invalidated):
        revalidate_path("/communities")
        assert invalidated == ["/communities"]

    def test_blank_path_is_not_sent(self, invalidated):
        revalidate_path("")
        revalidate_path(None)
        assert invalidated == []
