"""
HTTP client for the Bhandar IMS REST API.

Every non-2xx response raises ApiError carrying the server's "error"
message. Reads can go through a DataCache; a write invalidates the cached
collection it touches once the server has accepted it.
"""
import logging

import jwt
import requests

logger = logging.getLogger('bhandar.client')

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    def __str__(self):
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


def token_user_id(access_token):
    """user_id claim of an access token, read without verification since it only scopes the cache"""
    try:
        claims = jwt.decode(access_token, options={'verify_signature': False})
    except jwt.InvalidTokenError:
        logger.warning("Access token is not a readable JWT; cached data will be shared under an anonymous scope")
        return None
    return claims.get('user_id')


class BhandarClient:
    def __init__(self, base_url, access_token=None, timeout=DEFAULT_TIMEOUT, cache=None, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.cache = cache
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})
        self.access_token = None
        self.refresh_token = None
        self.user_id = None
        if access_token:
            self.set_token(access_token)

    def set_token(self, access_token, refresh_token=None):
        self.access_token = access_token
        self.refresh_token = refresh_token or self.refresh_token
        self.user_id = token_user_id(access_token)
        self.session.headers.update({'Authorization': f'Bearer {access_token}'})

    def request(self, method, path, params=None, json=None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.error(f"{method} {url} timed out after {self.timeout}s")
            raise ApiError('Request timed out')
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {str(e)}")
            raise ApiError(f'Network error: {str(e)}')

        if response.status_code == 204 or not response.content:
            payload = None
        elif 'application/json' in response.headers.get('Content-Type', ''):
            try:
                payload = response.json()
            except ValueError:
                payload = None
        else:
            payload = response.text

        if not response.ok:
            error = payload.get('error') if isinstance(payload, dict) else None
            logger.warning(f"{method} {url} returned {response.status_code}: {error}")
            raise ApiError(error or 'Request failed', response.status_code,
                           payload if isinstance(payload, dict) else None)
        return payload

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, json=None):
        return self.request('POST', path, json=json)

    def put(self, path, json=None):
        return self.request('PUT', path, json=json)

    def delete(self, path):
        return self.request('DELETE', path)

    def _cached_get(self, key, path, params=None, force_refresh=False):
        """Unfiltered collection reads go through the cache; filtered ones always hit the server"""
        if self.cache is None or params:
            return self.get(path, params)
        return self.cache.cached_fetch(self._cache_key(key), lambda: self.get(path, params),
                                       force_refresh=force_refresh)

    def _cache_key(self, key):
        """Cached collections belong to one server and one user"""
        return f"{self.base_url}|{self.user_id or 'anonymous'}|{key}"

    def _invalidate(self, *keys):
        if self.cache is not None:
            for key in keys:
                self.cache.invalidate(self._cache_key(key))

    # Auth
    def login(self, username, password):
        data = self.post('auth/login/', {'username': username, 'password': password})
        self.set_token(data['access'], data.get('refresh'))
        return data

    def signup(self, email, password, role, **extra):
        data = self.post('auth/signup/', {'email': email, 'password': password, 'role': role, **extra})
        self.set_token(data['access'], data.get('refresh'))
        return data

    def refresh(self):
        if not self.refresh_token:
            raise ApiError('No refresh token available')
        data = self.post('auth/refresh/', {'refresh': self.refresh_token})
        self.set_token(data['access'], data.get('refresh'))
        return data

    def me(self):
        return self.get('auth/me/')

    def logout(self):
        self.access_token = None
        self.refresh_token = None
        self.user_id = None
        self.session.headers.pop('Authorization', None)
        if self.cache is not None:
            self.cache.invalidate_all()

    # Stock purchases, overheads and fixed costs
    def fetch_inventory(self, force_refresh=False, **filters):
        return self._cached_get('inventory', 'inventory/', filters, force_refresh)

    def add_inventory(self, item):
        result = self.post('inventory/', item)
        self._invalidate('inventory')
        return result

    def update_inventory(self, pk, item):
        result = self.put(f'inventory/{pk}/', item)
        self._invalidate('inventory')
        return result

    def delete_inventory(self, pk):
        result = self.delete(f'inventory/{pk}/')
        self._invalidate('inventory')
        return result

    def fetch_overheads(self, force_refresh=False, **filters):
        return self._cached_get('overheads', 'overheads/', filters, force_refresh)

    def add_overhead(self, item):
        result = self.post('overheads/', item)
        self._invalidate('overheads')
        return result

    def update_overhead(self, pk, item):
        result = self.put(f'overheads/{pk}/', item)
        self._invalidate('overheads')
        return result

    def delete_overhead(self, pk):
        result = self.delete(f'overheads/{pk}/')
        self._invalidate('overheads')
        return result

    def fetch_fixed_costs(self, **filters):
        return self.get('fixed-costs/', filters)

    def add_fixed_cost(self, item):
        return self.post('fixed-costs/', item)

    # Sales
    def fetch_sales(self, force_refresh=False, **filters):
        return self._cached_get('sales', 'sales/', filters, force_refresh)

    def add_sales(self, record):
        result = self.post('sales/', record)
        self._invalidate('sales')
        return result

    def update_sales(self, pk, record):
        result = self.put(f'sales/{pk}/', record)
        self._invalidate('sales')
        return result

    def approve_sales(self, pk):
        result = self.post(f'sales/{pk}/approve/')
        self._invalidate('sales')
        return result

    def reject_sales(self, pk, reason):
        result = self.post(f'sales/{pk}/reject/', {'reason': reason})
        self._invalidate('sales')
        return result

    def sales_summary(self, **params):
        return self.get('sales/summary/', params)

    def upload_item_sales(self, rows, period=None):
        return self.post('item-sales/', {'salesData': rows, 'period': period})

    def fetch_item_sales(self, **filters):
        return self.get('item-sales/', filters)

    def clear_item_sales(self):
        return self.delete('item-sales/')

    def clear_all_data(self):
        result = self.delete('clear-data/')
        if self.cache is not None:
            self.cache.invalidate_all()
        return result

    # Catalog
    def fetch_inventory_items(self, entity_type=None, entity_id=None, category=None, force_refresh=False):
        params = {k: v for k, v in (('entityType', entity_type), ('entityId', entity_id),
                                    ('category', category)) if v}
        return self._cached_get('inventory-items', 'inventory-items/', params,
                                force_refresh)

    def add_inventory_item(self, item):
        result = self.post('inventory-items/', item)
        self._invalidate('inventory-items')
        return result

    def update_inventory_item(self, pk, item):
        result = self.put(f'inventory-items/{pk}/', item)
        self._invalidate('inventory-items')
        return result

    def delete_inventory_item(self, pk):
        result = self.delete(f'inventory-items/{pk}/')
        self._invalidate('inventory-items')
        return result

    def initialize_default_items(self):
        result = self.post('inventory-items/initialize-defaults/')
        self._invalidate('inventory-items')
        return result

    # HR
    def fetch_employees(self, **filters):
        return self.get('employees/', filters)

    def create_employee(self, employee):
        return self.post('employees/', employee)

    def update_employee(self, pk, employee):
        return self.put(f'employees/{pk}/', employee)

    def delete_employee(self, pk):
        return self.delete(f'employees/{pk}/')

    def next_employee_id(self):
        return self.get('employees/next-id/')['employee_id']

    def assign_manager(self, employee_pk, manager_pk):
        return self.put(f'employees/{employee_pk}/assign-manager/', {'manager': manager_pk})

    def assign_cluster_head(self, manager_pk, cluster_head_pk):
        return self.put(f'employees/{manager_pk}/assign-cluster-head/', {'cluster_head': cluster_head_pk})

    def organizational_hierarchy(self):
        return self.get('organizational-hierarchy/')

    def fetch_payouts(self, **filters):
        return self.get('payouts/', filters)

    def add_payouts(self, payouts):
        return self.post('payouts/', {'payouts': payouts})

    def delete_payout(self, pk):
        return self.delete(f'payouts/{pk}/')

    def fetch_timesheets(self, **filters):
        return self.get('timesheets/', filters)

    def save_timesheet(self, entry):
        return self.post('timesheets/', entry)

    def save_timesheets(self, entries):
        return self.post('timesheets/bulk/', {'timesheets': entries})

    def approve_timesheet(self, pk):
        return self.post(f'timesheets/{pk}/approve/')

    def reject_timesheet(self, pk, reason):
        return self.post(f'timesheets/{pk}/reject/', {'reason': reason})

    def fetch_leaves(self, **filters):
        return self.get('leaves/', filters)

    def apply_leave(self, leave):
        return self.post('leaves/', leave)

    def leave_balance(self, employee_id):
        return self.get(f'leaves/balance/{employee_id}/')['balance']

    def approve_leave(self, pk):
        return self.post(f'leaves/{pk}/approve/')

    def reject_leave(self, pk, reason):
        return self.post(f'leaves/{pk}/reject/', {'reason': reason})

    # Production
    def fetch_production_requests(self, **filters):
        return self.get('production-requests/', filters)

    def create_production_request(self, production_request):
        return self.post('production-requests/', production_request)

    def update_production_request_status(self, pk, new_status):
        return self.post(f'production-requests/{pk}/status/', {'status': new_status})

    def check_pending_requests(self):
        return self.post('production-requests/check-pending/')

    def stock_thresholds(self, store_pk):
        return self.get(f'stores/{store_pk}/stock-thresholds/')['thresholds']

    def save_stock_thresholds(self, store_pk, thresholds):
        return self.put(f'stores/{store_pk}/stock-thresholds/', {'thresholds': thresholds})

    def stock_status(self, location_type, location_id, month=None):
        params = {'location_type': location_type, 'location_id': location_id}
        if month:
            params['month'] = month
        return self.get('stock/status/', params)

    # Recalibration
    def recalibration_draft(self, location_type, location_id):
        return self.get('recalibrations/draft/', {'location_type': location_type, 'location_id': location_id})

    def submit_recalibration(self, location_type, location_id, items):
        return self.post('recalibrations/', {
            'location_type': location_type,
            'location_id': location_id,
            'items': items,
        })

    def last_recalibration(self, location_type, location_id):
        return self.get('recalibrations/last/', {'location_type': location_type, 'location_id': location_id})

    def pending_recalibrations(self):
        return self.get('recalibrations/pending/')

    def approve_recalibration(self, pk):
        return self.post(f'recalibrations/{pk}/approve/')

    def reject_recalibration(self, pk, reason):
        return self.post(f'recalibrations/{pk}/reject/', {'reason': reason})

    def wastage_report(self, month=None, **filters):
        params = dict(filters)
        if month:
            params['month'] = month
        return self.get('recalibrations/wastage-report/', params)

    # Notifications
    def notifications(self, unread_only=False):
        return self.get('notifications/', {'unread': 'true'} if unread_only else None)

    def mark_notification_read(self, pk):
        return self.post(f'notifications/{pk}/read/')

    def mark_all_notifications_read(self):
        return self.post('notifications/read-all/')

    # Export
    def export(self, dataset, export_format='csv', date_from=None, date_to=None):
        params = {'format': export_format}
        if date_from:
            params['date_from'] = str(date_from)
        if date_to:
            params['date_to'] = str(date_to)
        return self.get(f'export/{dataset}/', params)
