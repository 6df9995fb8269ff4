import json
from unittest.mock import Mock

import jwt
import requests
from django.core.cache import caches
from django.test import SimpleTestCase

from .api import ApiError, BhandarClient, token_user_id
from .cache import DataCache, FRESH_SECONDS, MAX_STALE_SECONDS

SIGNING_KEY = 'client-test-signing-key-0123456789abcdef'


def make_response(status_code=200, payload=None):
    response = requests.Response()
    response.status_code = status_code
    if payload is not None:
        response._content = json.dumps(payload).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = b''
    return response


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class DataCacheTests(SimpleTestCase):
    def setUp(self):
        caches['client'].clear()
        self.clock = FakeClock()
        self.cache = DataCache(clock=self.clock, executor=lambda fn: fn())

    def test_fresh_hit_does_not_fetch(self):
        fetch = Mock(return_value=['a'])
        self.assertEqual(self.cache.cached_fetch('stores', fetch), ['a'])
        self.assertEqual(self.cache.cached_fetch('stores', fetch), ['a'])
        self.assertEqual(fetch.call_count, 1)
        self.assertTrue(self.cache.is_fresh('stores'))

    def test_stale_value_served_then_refreshed(self):
        self.cache.set('sales', ['old'])
        self.clock.advance(FRESH_SECONDS + 1)
        fetch = Mock(return_value=['new'])

        self.assertEqual(self.cache.cached_fetch('sales', fetch), ['old'])
        fetch.assert_called_once()
        self.assertEqual(self.cache.get('sales'), ['new'])
        self.assertTrue(self.cache.is_fresh('sales'))

    def test_failed_refresh_keeps_stale_value(self):
        self.cache.set('sales', ['old'])
        self.clock.advance(FRESH_SECONDS + 1)
        fetch = Mock(side_effect=ApiError('Network error: down'))

        self.assertEqual(self.cache.cached_fetch('sales', fetch), ['old'])
        self.assertEqual(self.cache.get('sales'), ['old'])

    def test_refresh_deduplicated_while_running(self):
        pending = []
        cache = DataCache(clock=self.clock, executor=pending.append)
        cache.set('sales', ['old'])
        self.clock.advance(FRESH_SECONDS + 1)
        fetch = Mock(return_value=['new'])

        cache.cached_fetch('sales', fetch)
        cache.cached_fetch('sales', fetch)
        self.assertEqual(len(pending), 1)
        pending[0]()
        self.assertEqual(cache.get('sales'), ['new'])

    def test_entries_expire_after_max_stale_age(self):
        self.cache.set('sales', ['old'])
        self.clock.advance(MAX_STALE_SECONDS + 1)
        self.assertIsNone(self.cache.get('sales'))
        fetch = Mock(return_value=['new'])
        self.assertEqual(self.cache.cached_fetch('sales', fetch), ['new'])

    def test_version_mismatch_discards_entry(self):
        self.cache.set('sales', ['old'])
        newer = DataCache(version=2, clock=self.clock)
        self.assertIsNone(newer.get('sales'))

    def test_force_refresh_and_skip_cache(self):
        self.cache.set('sales', ['old'])
        self.assertEqual(self.cache.cached_fetch('sales', lambda: ['forced'], force_refresh=True), ['forced'])
        self.assertEqual(self.cache.cached_fetch('sales', lambda: ['skipped'], skip_cache=True), ['skipped'])
        self.assertEqual(self.cache.get('sales'), ['skipped'])

    def test_invalidate_and_invalidate_all(self):
        self.cache.set('sales', [1])
        self.cache.set('inventory', [2])
        self.cache.invalidate('sales')
        self.assertIsNone(self.cache.get('sales'))
        self.assertEqual(self.cache.get('inventory'), [2])
        self.cache.invalidate_all()
        self.assertIsNone(self.cache.get('inventory'))


class BhandarClientTests(SimpleTestCase):
    def setUp(self):
        caches['client'].clear()
        self.session = Mock()
        self.session.headers = {}
        self.client = BhandarClient('http://api.test/api/v1/', access_token='abc', session=self.session)

    def test_token_sent_as_bearer(self):
        self.assertEqual(self.session.headers['Authorization'], 'Bearer abc')

    def test_success_returns_payload(self):
        self.session.request.return_value = make_response(200, [{'id': 1}])
        self.assertEqual(self.client.fetch_employees(role='manager'), [{'id': 1}])
        self.session.request.assert_called_once_with(
            'GET', 'http://api.test/api/v1/employees/', params={'role': 'manager'}, json=None, timeout=10)

    def test_error_message_taken_from_payload(self):
        self.session.request.return_value = make_response(403, {'error': 'Only managers can add sales data'})
        with self.assertRaises(ApiError) as ctx:
            self.client.add_sales({'date': '2026-03-02'})
        self.assertEqual(ctx.exception.message, 'Only managers can add sales data')
        self.assertEqual(ctx.exception.status_code, 403)

    def test_error_without_message(self):
        self.session.request.return_value = make_response(500)
        with self.assertRaises(ApiError) as ctx:
            self.client.me()
        self.assertEqual(ctx.exception.message, 'Request failed')

    def test_timeout_and_network_errors(self):
        self.session.request.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(ApiError) as ctx:
            self.client.me()
        self.assertEqual(ctx.exception.message, 'Request timed out')

        self.session.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(ApiError) as ctx:
            self.client.me()
        self.assertTrue(ctx.exception.message.startswith('Network error'))

    def test_login_stores_tokens(self):
        self.session.request.return_value = make_response(200, {'access': 'new-access', 'refresh': 'r1'})
        self.client.login('ravi@example.com', 'secret')
        self.assertEqual(self.client.refresh_token, 'r1')
        self.assertEqual(self.session.headers['Authorization'], 'Bearer new-access')

    def test_refresh_without_token(self):
        client = BhandarClient('http://api.test/api/v1', session=self.session)
        with self.assertRaises(ApiError):
            client.refresh()

    def test_unfiltered_reads_cached_and_writes_invalidate(self):
        client = BhandarClient('http://api.test/api/v1', access_token='abc', session=self.session,
                               cache=DataCache(executor=lambda fn: fn()))
        self.session.request.return_value = make_response(200, [{'id': 1}])
        client.fetch_sales()
        client.fetch_sales()
        self.assertEqual(self.session.request.call_count, 1)

        # Filtered reads bypass the cache
        client.fetch_sales(store=3)
        self.assertEqual(self.session.request.call_count, 2)

        self.session.request.return_value = make_response(201, {'id': 2})
        client.add_sales({'date': '2026-03-02'})
        self.session.request.return_value = make_response(200, [{'id': 1}, {'id': 2}])
        self.assertEqual(client.fetch_sales(), [{'id': 1}, {'id': 2}])

    def test_logout_clears_token_and_cache(self):
        cache = DataCache()
        cache.set('sales', [1])
        client = BhandarClient('http://api.test/api/v1', access_token='abc', session=self.session, cache=cache)
        client.logout()
        self.assertNotIn('Authorization', self.session.headers)
        self.assertIsNone(cache.get('sales'))


class CacheInvalidationOrderTests(SimpleTestCase):
    def setUp(self):
        caches['client'].clear()
        self.session = Mock()
        self.session.headers = {}
        self.cache = DataCache(executor=lambda fn: fn())
        self.client = BhandarClient('http://api.test/api/v1', access_token='abc', session=self.session,
                                    cache=self.cache)
        self.session.request.return_value = make_response(200, [{'id': 1}])
        self.client.fetch_sales()
        self.sales_key = self.client._cache_key('sales')

    def test_cache_kept_until_write_succeeds(self):
        seen_during_write = []

        def respond(method, url, **kwargs):
            seen_during_write.append(self.cache.get(self.sales_key))
            return make_response(201, {'id': 2})

        self.session.request.side_effect = respond
        self.client.add_sales({'date': '2026-03-02'})
        self.assertEqual(seen_during_write, [[{'id': 1}]])
        self.assertIsNone(self.cache.get(self.sales_key))

    def test_failed_write_keeps_cache(self):
        self.session.request.return_value = make_response(400, {'error': 'date: This field is required.'})
        with self.assertRaises(ApiError):
            self.client.add_sales({})
        self.assertEqual(self.client.fetch_sales(), [{'id': 1}])
        self.assertEqual(self.session.request.call_count, 2)

    def test_refresh_started_before_invalidation_is_discarded(self):
        pending = []
        cache = DataCache(clock=FakeClock(), executor=pending.append)
        cache.set('sales', ['old'])
        cache.clock.advance(FRESH_SECONDS + 1)

        cache.cached_fetch('sales', lambda: ['before write'])
        cache.invalidate('sales')
        pending[0]()
        self.assertIsNone(cache.get('sales'))

        # The next refresh is stored normally
        self.assertEqual(cache.cached_fetch('sales', lambda: ['after write']), ['after write'])
        self.assertEqual(cache.get('sales'), ['after write'])


class CacheScopeTests(SimpleTestCase):
    def setUp(self):
        caches['client'].clear()
        self.cache = DataCache(executor=lambda fn: fn())

    def make_client(self, user_id, base_url='http://api.test/api/v1'):
        session = Mock()
        session.headers = {}
        session.request.return_value = make_response(200, [{'owner': user_id}])
        token = jwt.encode({'user_id': user_id}, SIGNING_KEY, algorithm='HS256')
        return BhandarClient(base_url, access_token=token, session=session, cache=self.cache)

    def test_token_user_id(self):
        self.assertEqual(token_user_id(jwt.encode({'user_id': 7}, SIGNING_KEY, algorithm='HS256')), 7)
        self.assertIsNone(token_user_id('abc'))

    def test_users_do_not_share_cached_collections(self):
        first = self.make_client(1)
        second = self.make_client(2)
        self.assertEqual(first.fetch_sales(), [{'owner': 1}])
        self.assertEqual(second.fetch_sales(), [{'owner': 2}])
        second.session.request.assert_called_once()

    def test_servers_do_not_share_cached_collections(self):
        first = self.make_client(1)
        other_server = self.make_client(1, base_url='http://other.test/api/v1')
        first.fetch_sales()
        other_server.fetch_sales()
        other_server.session.request.assert_called_once()
