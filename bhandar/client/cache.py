"""
Stale-while-revalidate cache for data fetched from the API.

Entries live in the "client" Django cache alias. An entry is fresh for
FRESH_SECONDS; after that it is still served while a background refresh
runs, until MAX_STALE_SECONDS when it is dropped and fetched again.
"""
import logging
import threading
import time

from django.core.cache import caches

logger = logging.getLogger('bhandar.client')

CACHE_ALIAS = 'client'
KEY_PREFIX = 'bhandar_cache_'
FRESH_SECONDS = 5 * 60
MAX_STALE_SECONDS = 60 * 60
CACHE_VERSION = 1


def _run_in_thread(fn):
    thread = threading.Thread(target=fn, daemon=True)
    thread.start()
    return thread


class DataCache:
    def __init__(self, alias=CACHE_ALIAS, version=CACHE_VERSION, clock=time.time, executor=_run_in_thread):
        self.backend = caches[alias]
        self.version = version
        self.clock = clock
        self.executor = executor
        self._refreshing = set()
        self._epochs = {}
        self._lock = threading.Lock()

    def _generation(self):
        generation = self.backend.get(f'{KEY_PREFIX}generation')
        if generation is None:
            generation = 1
            self.backend.add(f'{KEY_PREFIX}generation', generation, None)
        return generation

    def _key(self, key):
        return f'{KEY_PREFIX}{self._generation()}:{key}'

    def _entry(self, key):
        entry = self.backend.get(self._key(key))
        if entry is None:
            return None
        if entry.get('version') != self.version or self.age(entry) > MAX_STALE_SECONDS:
            self.backend.delete(self._key(key))
            return None
        return entry

    def age(self, entry):
        return self.clock() - entry['timestamp']

    def get(self, key):
        entry = self._entry(key)
        return entry['data'] if entry else None

    def is_fresh(self, key):
        entry = self._entry(key)
        return entry is not None and self.age(entry) < FRESH_SECONDS

    def set(self, key, data):
        entry = {'data': data, 'timestamp': self.clock(), 'version': self.version}
        self.backend.set(self._key(key), entry, MAX_STALE_SECONDS)

    def _epoch(self, key):
        return self._epochs.get(key, 0), self._epochs.get(None, 0)

    def _bump(self, key):
        with self._lock:
            self._epochs[key] = self._epochs.get(key, 0) + 1

    def invalidate(self, key):
        self._bump(key)
        self.backend.delete(self._key(key))

    def invalidate_all(self):
        """Orphan every entry by moving to a new key generation"""
        self._bump(None)
        generation = self._generation()
        self.backend.set(f'{KEY_PREFIX}generation', generation + 1, None)
        logger.info("Invalidated all client caches")

    def _refresh(self, key, fetch_fn):
        with self._lock:
            if key in self._refreshing:
                return
            self._refreshing.add(key)
            epoch = self._epoch(key)

        def run():
            try:
                data = fetch_fn()
                # An invalidation while fetching means the result may predate a write
                if self._epoch(key) != epoch:
                    logger.debug(f"Background refresh discarded after invalidation: {key}")
                    return
                self.set(key, data)
                logger.debug(f"Background refresh complete: {key}")
            except Exception as e:
                # The stale value stays in place and is retried on the next read
                logger.error(f"Background refresh failed: {key}: {str(e)}")
            finally:
                with self._lock:
                    self._refreshing.discard(key)

        self.executor(run)

    def cached_fetch(self, key, fetch_fn, force_refresh=False, skip_cache=False):
        """
        Return cached data for key, calling fetch_fn when needed.

        skip_cache always fetches (and stores the result); force_refresh
        ignores whatever is cached.
        """
        if skip_cache:
            data = fetch_fn()
            self.set(key, data)
            return data

        entry = None if force_refresh else self._entry(key)
        if entry is not None:
            if self.age(entry) < FRESH_SECONDS:
                logger.debug(f"Cache hit (fresh): {key}")
            else:
                logger.debug(f"Cache hit (stale): {key} - refreshing in background")
                self._refresh(key, fetch_fn)
            return entry['data']

        logger.debug(f"Cache miss: {key}")
        data = fetch_fn()
        self.set(key, data)
        return data
