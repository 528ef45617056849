from flask import g


class RequestCache:
    """Memoizes loader results for the lifetime of one request."""

    def __init__(self):
        self._entries = {}

    def fetch(self, key, loader):
        if key not in self._entries:
            self._entries[key] = loader()
        return self._entries[key]

    def clear(self):
        self._entries.clear()

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)


def memoized(cache, key, loader):
    if cache is None:
        return loader()
    return cache.fetch(key, loader)


def get_request_cache():
    if 'request_cache' not in g:
        g.request_cache = RequestCache()
    return g.request_cache
