from datetime import date, datetime, timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from bhandar.core import timeutils
from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bhandar.notifications.models import Notification
from bhandar.recalibration.models import StockRecalibration, RecalibrationItem
from . import ledger
from .models import ProductionBatch, ProductionRequest, StockThreshold
from .stock import stock_status, opening_balance


class LedgerTests(TestCase):
    def test_month_arithmetic(self):
        self.assertEqual(ledger.month_key(date(2026, 3, 9)), '2026-03')
        self.assertEqual(ledger.previous_month('2026-01'), '2025-12')
        self.assertEqual(ledger.next_month('2025-12'), '2026-01')

    def test_closing_balance(self):
        self.assertEqual(
            ledger.closing_balance({'veg_momo': 10}, {'veg_momo': 5, 'paneer_momo': 3}, {'veg_momo': 12}),
            {'veg_momo': 3, 'paneer_momo': 3},
        )

    def test_carry_forward_from_same_month(self):
        self.assertEqual(ledger.carry_forward('2026-03', {'veg_momo': 40}, {}, '2026-03'), {'veg_momo': 40})

    def test_carry_forward_keeps_uncounted_items(self):
        flows = {'2026-02': ({'veg_momo': 10}, {})}
        self.assertEqual(
            ledger.carry_forward('2026-02', {'paneer_momo': 4}, flows, '2026-03',
                                 uncounted={'veg_momo': 90, 'paneer_momo': 1}),
            {'veg_momo': 100, 'paneer_momo': 4},
        )

    def test_carry_forward_rolls_months(self):
        flows = {
            '2026-01': ({'veg_momo': 100}, {'veg_momo': 30}),
            '2026-02': ({'veg_momo': 20}, {'veg_momo': 50}),
        }
        self.assertEqual(ledger.carry_forward('2026-01', {'veg_momo': 10}, flows, '2026-03'), {'veg_momo': 50})

    def test_carry_forward_rejects_future_count(self):
        with self.assertRaises(ValueError):
            ledger.carry_forward('2026-04', {}, {}, '2026-03')

    def test_opening_without_recalibration(self):
        flows = {'2026-02': ({'veg_momo': 80}, {'veg_momo': 30})}
        self.assertEqual(ledger.opening_without_recalibration(flows, '2026-03'), {'veg_momo': 50})
        self.assertEqual(ledger.opening_without_recalibration({}, '2026-03'), {})

    def test_classify_stock(self):
        thresholds = {'high': 600, 'medium': 300, 'low': 150}
        self.assertEqual(ledger.classify_stock(0, thresholds), ledger.LEVEL_CRITICAL)
        self.assertEqual(ledger.classify_stock(150, thresholds), ledger.LEVEL_LOW)
        self.assertEqual(ledger.classify_stock(300, thresholds), ledger.LEVEL_MEDIUM)
        self.assertEqual(ledger.classify_stock(599, thresholds), ledger.LEVEL_MEDIUM)
        self.assertEqual(ledger.classify_stock(600, thresholds), ledger.LEVEL_HIGH)

    def test_match_item_key(self):
        known = {'veg', 'chicken_cheese_momo', 'paneer_momo'}
        self.assertEqual(ledger.match_item_key('Chicken Cheese Momos', known), 'chicken_cheese_momo')
        self.assertEqual(ledger.match_item_key('Paneer momo', known), 'paneer_momo')
        self.assertEqual(ledger.match_item_key('Veg Momos', known), 'veg')
        self.assertIsNone(ledger.match_item_key('Cold Drink', known))


class ProductionRequestTests(TestCase):
    def setUp(self):
        self.head_user = TestDataFactory.create_cluster_head()
        self.kitchen_user = TestDataFactory.create_user()
        self.manager = TestDataFactory.create_manager()
        self.house = TestDataFactory.create_production_house(production_head=self.kitchen_user)
        self.store = TestDataFactory.create_store(production_house=self.house, manager=self.manager)
        self.veg = TestDataFactory.create_item(name='veg_momo')
        self.chicken = TestDataFactory.create_item(name='chicken_momo')
        self.manager_client = AuthenticatedAPIClient().authenticate_user(self.manager)
        self.kitchen_client = AuthenticatedAPIClient().authenticate_user(self.kitchen_user)

    def create_request(self, **overrides):
        data = {
            'store': self.store.id,
            'request_date': '2026-03-02',
            'lines': [{'item': self.veg.id, 'quantity': 200}, {'item': self.chicken.id, 'quantity': 0}],
        }
        data.update(overrides)
        return self.manager_client.post('/api/v1/production-requests/', data, format='json')

    def test_create_defaults_house_and_drops_empty_lines(self):
        response = self.create_request()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['production_house'], self.house.id)
        self.assertEqual(len(response.data['lines']), 1)
        self.assertEqual(response.data['total_quantity'], 200)
        self.assertTrue(Notification.objects.filter(recipient=self.kitchen_user,
                                                    type=Notification.TYPE_PRODUCTION_REQUEST).exists())

    def test_request_needs_a_positive_line(self):
        response = self.create_request(lines=[{'item': self.veg.id, 'quantity': 0}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('lines', response.data)

    def test_one_request_per_store_and_day(self):
        self.create_request()
        response = self.create_request()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('request_date', response.data)

    def test_manager_cannot_request_for_another_store(self):
        other_store = TestDataFactory.create_store(production_house=self.house,
                                                   manager=TestDataFactory.create_manager())
        response = self.create_request(store=other_store.id)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)
        self.assertFalse(ProductionRequest.objects.exists())

    def test_store_without_house_rejected(self):
        store = TestDataFactory.create_store(manager=self.manager)
        response = self.create_request(store=store.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('production_house', response.data)

    @patch('bhandar.core.timeutils.today', return_value=date(2026, 3, 4))
    def test_full_flow_to_delivery(self, _today):
        request_id = self.create_request().data['id']
        url = f'/api/v1/production-requests/{request_id}/status/'

        for step in ['accepted', 'in_preparation', 'prepared', 'shipped']:
            response = self.kitchen_client.post(url, {'status': step}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK, step)
            self.assertEqual(response.data['status'], step)
            self.assertEqual(response.data[f'{step}_by'], self.kitchen_user.id)

        # Only the store side confirms delivery
        response = self.kitchen_client.post(url, {'status': 'delivered'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.manager_client.post(url, {'status': 'delivered'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        production_request = ProductionRequest.objects.get(pk=request_id)
        self.assertEqual(production_request.delivered_date, date(2026, 3, 4))
        self.assertEqual(
            Notification.objects.filter(recipient=self.manager, type=Notification.TYPE_REQUEST_STATUS).count(), 4)

    def test_cannot_skip_steps(self):
        request_id = self.create_request().data['id']
        response = self.kitchen_client.post(f'/api/v1/production-requests/{request_id}/status/',
                                            {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_store_manager_cannot_accept(self):
        request_id = self.create_request().data['id']
        response = self.manager_client.post(f'/api/v1/production-requests/{request_id}/status/',
                                            {'status': 'accepted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_only_while_pending(self):
        request_id = self.create_request().data['id']
        url = f'/api/v1/production-requests/{request_id}/status/'
        self.kitchen_client.post(url, {'status': 'accepted'}, format='json')
        response = self.manager_client.post(url, {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        other_id = self.create_request(request_date='2026-03-03').data['id']
        response = self.manager_client.post(f'/api/v1/production-requests/{other_id}/status/',
                                            {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # A cancelled request frees the date
        self.assertEqual(self.create_request(request_date='2026-03-03').status_code, status.HTTP_201_CREATED)

    def test_edit_only_pending(self):
        request_id = self.create_request().data['id']
        url = f'/api/v1/production-requests/{request_id}/'
        response = self.manager_client.patch(url, {'notes': 'extra chutney'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.kitchen_client.post(f'{url}status/', {'status': 'accepted'}, format='json')
        response = self.manager_client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_filter_accepts_several_values(self):
        first = self.create_request().data['id']
        self.create_request(request_date='2026-03-03')
        self.kitchen_client.post(f'/api/v1/production-requests/{first}/status/', {'status': 'accepted'},
                                 format='json')
        response = self.manager_client.get('/api/v1/production-requests/?status=accepted&status=shipped')
        self.assertEqual([row['id'] for row in response.data], [first])

    def test_check_pending_flags_each_request_once(self):
        request_id = self.create_request().data['id']
        ProductionRequest.objects.filter(pk=request_id).update(created_at=timeutils.now() - timedelta(hours=13))
        self.create_request(request_date='2026-03-03')

        response = self.manager_client.post('/api/v1/production-requests/check-pending/')
        self.assertEqual(response.data, {'newPendingCount': 1, 'notificationsSent': 1})
        self.assertTrue(Notification.objects.filter(recipient=self.head_user,
                                                    type=Notification.TYPE_REQUEST_DELAYED).exists())

        response = self.manager_client.post('/api/v1/production-requests/check-pending/')
        self.assertEqual(response.data, {'newPendingCount': 0, 'notificationsSent': 0})


class ProductionBatchTests(TestCase):
    def setUp(self):
        self.kitchen_user = TestDataFactory.create_user()
        self.house = TestDataFactory.create_production_house(production_head=self.kitchen_user)
        self.veg = TestDataFactory.create_item(name='veg_momo')
        self.client = AuthenticatedAPIClient().authenticate_user(self.kitchen_user)

    def test_production_head_records_batch(self):
        response = self.client.post('/api/v1/production-batches/', {
            'date': '2026-03-02', 'production_house': self.house.id,
            'lines': [{'item': self.veg.id, 'dough': '12.5', 'stuffing': '8', 'final': 900}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['approval_status'], 'pending')
        self.assertEqual(response.data['lines'][0]['item_key'], 'veg_momo')

    def test_raw_material_cannot_be_produced(self):
        flour = TestDataFactory.create_item(name='maida', category='raw_material', unit='kg')
        response = self.client.post('/api/v1/production-batches/', {
            'date': '2026-03-02', 'production_house': self.house.id,
            'lines': [{'item': flour.id, 'final': 10}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_user_cannot_record(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.post('/api/v1/production-batches/', {
            'date': '2026-03-02', 'production_house': self.house.id,
            'lines': [{'item': self.veg.id, 'final': 10}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cluster_head_approves(self):
        batch = TestDataFactory.create_batch(self.house, date(2026, 3, 2), {self.veg: 500}, approved=False)
        head_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_cluster_head())
        response = head_client.post(f'/api/v1/production-batches/{batch.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        batch.refresh_from_db()
        self.assertEqual(batch.approval_status, ProductionBatch.STATUS_APPROVED)

        self.assertEqual(self.client.delete(f'/api/v1/production-batches/{batch.id}/').status_code,
                         status.HTTP_400_BAD_REQUEST)


class StockThresholdTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.store = TestDataFactory.create_store(manager=self.manager)
        self.veg = TestDataFactory.create_item(name='veg_momo')
        self.client = AuthenticatedAPIClient().authenticate_user(self.manager)
        self.url = f'/api/v1/stores/{self.store.id}/stock-thresholds/'

    def test_defaults_filled_in(self):
        response = self.client.get(self.url)
        self.assertEqual(response.data['thresholds'], {'veg_momo': {'high': 600, 'medium': 300, 'low': 150}})

    def test_update(self):
        response = self.client.put(self.url, {'thresholds': {'veg_momo': {'high': 400, 'medium': 200, 'low': 50}}},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['thresholds']['veg_momo']['low'], 50)
        self.assertEqual(StockThreshold.objects.get().updated_by, self.manager)

    def test_ordering_enforced(self):
        response = self.client.put(self.url, {'thresholds': {'veg_momo': {'high': 100, 'medium': 200, 'low': 50}}},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('veg_momo', response.data['errors'])

    def test_unknown_item(self):
        response = self.client.put(self.url, {'thresholds': {'pizza': {'high': 3, 'medium': 2, 'low': 1}}},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_manager_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.put(self.url, {'thresholds': {'veg_momo': {'high': 3, 'medium': 2, 'low': 1}}},
                              format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class StockStatusTests(TestCase):
    def setUp(self):
        self.house = TestDataFactory.create_production_house()
        self.store = TestDataFactory.create_store(production_house=self.house)
        self.veg = TestDataFactory.create_item(name='veg_momo', display_name='Veg Momo')
        # February: 100 delivered, 30 sold
        TestDataFactory.create_production_request(self.store, {self.veg: 100}, date(2026, 2, 9),
                                                  status='delivered', delivered_date=date(2026, 2, 10),
                                                  shipped_at=timezone.make_aware(datetime(2026, 2, 9, 18, 0)))
        TestDataFactory.create_item_sale('Veg Momos', 30, date(2026, 2, 20), self.store)
        # March: 50 delivered, 20 sold
        TestDataFactory.create_production_request(self.store, {self.veg: 50}, date(2026, 3, 3),
                                                  status='delivered', delivered_date=date(2026, 3, 3),
                                                  shipped_at=timezone.make_aware(datetime(2026, 3, 3, 8, 0)))
        TestDataFactory.create_item_sale('veg momo', 20, date(2026, 3, 5), self.store)
        TestDataFactory.create_item_sale('Cold Drink', 99, date(2026, 3, 5), self.store)

    def test_store_without_recalibration_opens_with_previous_month_net(self):
        rows = stock_status('store', self.store.id, '2026-03')
        self.assertEqual(rows, [{
            'item_key': 'veg_momo',
            'item_name': 'Veg Momo',
            'unit': 'pieces',
            'opening': 70,
            'received': 50,
            'sold': 20,
            'current_stock': 100,
            'thresholds': {'high': 600, 'medium': 300, 'low': 150},
            'level': 'low',
        }])

    def test_recalibration_count_is_rolled_forward(self):
        recalibration = StockRecalibration.objects.create(
            location_type='store', location_id=self.store.id, location_name=self.store.name,
            date=date(2026, 2, 2), month='2026-02', status=StockRecalibration.STATUS_APPROVED)
        RecalibrationItem.objects.create(recalibration=recalibration, item_key='veg_momo', item_name='Veg Momo',
                                         system_quantity=70, actual_quantity=60, difference=-10,
                                         adjustment_type='wastage')
        self.assertEqual(opening_balance('store', self.store.id, '2026-03'), {'veg_momo': 130})
        self.assertEqual(stock_status('store', self.store.id, '2026-03')[0]['current_stock'], 160)

    def test_partial_count_keeps_uncounted_items(self):
        paneer = TestDataFactory.create_item(name='paneer_momo', display_name='Paneer Momo')
        recalibration = StockRecalibration.objects.create(
            location_type='store', location_id=self.store.id, location_name=self.store.name,
            date=date(2026, 3, 2), month='2026-03', status=StockRecalibration.STATUS_PENDING)
        RecalibrationItem.objects.create(recalibration=recalibration, item_key=paneer.name, item_name='Paneer Momo',
                                         system_quantity=0, actual_quantity=5, difference=5,
                                         adjustment_type='counting_error')

        self.assertEqual(opening_balance('store', self.store.id, '2026-03'), {'veg_momo': 70, 'paneer_momo': 5})
        rows = {row['item_key']: row for row in stock_status('store', self.store.id, '2026-03')}
        self.assertEqual(rows['veg_momo']['current_stock'], 100)
        self.assertEqual(rows['paneer_momo']['current_stock'], 5)

    def test_partial_count_falls_back_to_earlier_count(self):
        february = StockRecalibration.objects.create(
            location_type='store', location_id=self.store.id, location_name=self.store.name,
            date=date(2026, 2, 2), month='2026-02', status=StockRecalibration.STATUS_APPROVED)
        RecalibrationItem.objects.create(recalibration=february, item_key='veg_momo', item_name='Veg Momo',
                                         system_quantity=70, actual_quantity=60, difference=-10,
                                         adjustment_type='wastage')
        march = StockRecalibration.objects.create(
            location_type='store', location_id=self.store.id, location_name=self.store.name,
            date=date(2026, 3, 2), month='2026-03', status=StockRecalibration.STATUS_APPROVED)
        RecalibrationItem.objects.create(recalibration=march, item_key='paneer_momo', item_name='Paneer Momo',
                                         actual_quantity=8)
        self.assertEqual(opening_balance('store', self.store.id, '2026-03'), {'veg_momo': 130, 'paneer_momo': 8})

    def test_same_name_scoped_and_global_items_reported_once(self):
        TestDataFactory.create_item(name='veg_momo', display_name='Veg Momo', linked_entity_type='store',
                                    linked_entity_id=str(self.store.id))
        rows = stock_status('store', self.store.id, '2026-03')
        self.assertEqual([row['item_key'] for row in rows], ['veg_momo'])
        self.assertEqual(rows[0]['current_stock'], 100)

    def test_rejected_recalibration_ignored(self):
        recalibration = StockRecalibration.objects.create(
            location_type='store', location_id=self.store.id, location_name=self.store.name,
            date=date(2026, 3, 2), month='2026-03', status=StockRecalibration.STATUS_REJECTED)
        RecalibrationItem.objects.create(recalibration=recalibration, item_key='veg_momo', item_name='Veg Momo',
                                         actual_quantity=1)
        self.assertEqual(opening_balance('store', self.store.id, '2026-03'), {'veg_momo': 70})

    def test_production_house_ledger(self):
        TestDataFactory.create_batch(self.house, date(2026, 3, 1), {self.veg: 400})
        TestDataFactory.create_batch(self.house, date(2026, 3, 2), {self.veg: 999}, approved=False)
        rows = stock_status('production_house', self.house.id, '2026-03')
        self.assertEqual(rows[0]['opening'], -100)
        self.assertEqual(rows[0]['produced'], 400)
        self.assertEqual(rows[0]['sent'], 50)
        self.assertEqual(rows[0]['current_stock'], 250)
        self.assertNotIn('level', rows[0])

    def test_endpoint_validates_params(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.get('/api/v1/stock/status/', {'location_type': 'warehouse', 'location_id': 1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = client.get('/api/v1/stock/status/', {'location_id': self.store.id, 'month': '2026-13'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = client.get('/api/v1/stock/status/', {'location_id': 9999, 'month': '2026-03'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = client.get('/api/v1/stock/status/', {'location_id': self.store.id, 'month': '2026-03'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['location_name'], self.store.name)
        self.assertEqual(response.data['items'][0]['current_stock'], 100)
