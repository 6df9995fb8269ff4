from datetime import date
from unittest.mock import patch

from django.test import TestCase
from rest_framework import status

from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bhandar.notifications.models import Notification
from .models import StockRecalibration, RecalibrationItem
from .services import in_recalibration_window

IN_WINDOW = date(2026, 3, 3)
OUT_OF_WINDOW = date(2026, 3, 12)


class WindowTests(TestCase):
    def test_first_five_days_only(self):
        self.assertTrue(in_recalibration_window(date(2026, 3, 1)))
        self.assertTrue(in_recalibration_window(date(2026, 3, 5)))
        self.assertFalse(in_recalibration_window(date(2026, 3, 6)))


class RecalibrationTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.house = TestDataFactory.create_production_house()
        self.store = TestDataFactory.create_store(production_house=self.house, manager=self.manager)
        self.veg = TestDataFactory.create_item(name='veg_momo', display_name='Veg Momo')
        self.paneer = TestDataFactory.create_item(name='paneer_momo', display_name='Paneer Momo')
        TestDataFactory.create_production_request(self.store, {self.veg: 100}, date(2026, 2, 10),
                                                  status='delivered', delivered_date=date(2026, 2, 11))
        self.submitter = TestDataFactory.create_user(role='employee')
        self.client = AuthenticatedAPIClient().authenticate_user(self.submitter)

    def submit(self, items=None):
        return self.client.post('/api/v1/recalibrations/', {
            'location_type': 'store',
            'location_id': self.store.id,
            'items': items if items is not None else [
                {'item_key': 'veg_momo', 'actual_quantity': 90, 'adjustment_type': 'wastage'},
                {'item_key': 'paneer_momo', 'actual_quantity': 0},
            ],
        }, format='json')

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_draft_uses_system_quantities(self, _today):
        response = self.client.get('/api/v1/recalibrations/draft/',
                                   {'location_type': 'store', 'location_id': self.store.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['windowOpen'])
        self.assertEqual(response.data['month'], '2026-03')
        items = {row['item_key']: row for row in response.data['items']}
        self.assertEqual(items['veg_momo']['system_quantity'], 100)
        self.assertEqual(items['veg_momo']['actual_quantity'], 100)
        self.assertEqual(items['paneer_momo']['system_quantity'], 0)

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_submit_computes_difference(self, _today):
        response = self.submit()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['month'], '2026-03')
        self.assertEqual(response.data['location_name'], self.store.name)
        veg = RecalibrationItem.objects.get(item_key='veg_momo')
        self.assertEqual(veg.system_quantity, 100)
        self.assertEqual(veg.difference, -10)
        paneer = RecalibrationItem.objects.get(item_key='paneer_momo')
        self.assertIsNone(paneer.adjustment_type)

    @patch('bhandar.core.timeutils.today', return_value=OUT_OF_WINDOW)
    def test_submit_outside_window(self, _today):
        response = self.submit()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'],
                         'Stock recalibration is only allowed during the first 5 days of the month')
        self.assertFalse(StockRecalibration.objects.exists())

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_difference_needs_adjustment_type(self, _today):
        response = self.submit([{'item_key': 'veg_momo', 'actual_quantity': 95}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('veg_momo', response.data['errors'])

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_unknown_item_rejected(self, _today):
        response = self.submit([{'item_key': 'pizza', 'actual_quantity': 1, 'adjustment_type': 'wastage'}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_one_count_per_month(self, _today):
        self.assertEqual(self.submit().status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.submit().status_code, status.HTTP_409_CONFLICT)

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_rejected_count_can_be_resubmitted(self, _today):
        recalibration_id = self.submit().data['id']
        manager_client = AuthenticatedAPIClient().authenticate_user(self.manager)
        response = manager_client.post(f'/api/v1/recalibrations/{recalibration_id}/reject/',
                                       {'reason': 'Recount the freezer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(Notification.objects.filter(recipient=self.submitter,
                                                    type=Notification.TYPE_RECALIBRATION).exists())
        self.assertEqual(self.submit().status_code, status.HTTP_201_CREATED)

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_review_permissions(self, _today):
        recalibration_id = self.submit().data['id']
        response = self.client.post(f'/api/v1/recalibrations/{recalibration_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/recalibrations/pending/').status_code,
                         status.HTTP_403_FORBIDDEN)

        manager_client = AuthenticatedAPIClient().authenticate_user(self.manager)
        self.assertEqual(len(manager_client.get('/api/v1/recalibrations/pending/').data), 1)
        response = manager_client.post(f'/api/v1/recalibrations/{recalibration_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        response = manager_client.post(f'/api/v1/recalibrations/{recalibration_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('bhandar.core.timeutils.today', return_value=IN_WINDOW)
    def test_last_recalibration(self, _today):
        params = {'location_type': 'store', 'location_id': self.store.id}
        response = self.client.get('/api/v1/recalibrations/last/', params)
        self.assertEqual(response.data, {'record': None, 'lastRecalibration': None})

        self.submit()
        response = self.client.get('/api/v1/recalibrations/last/', params)
        self.assertEqual(response.data['lastRecalibration'], IN_WINDOW)
        self.assertEqual(len(response.data['record']['items']), 2)


class WastageReportTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_cluster_head())

    def make_count(self, location_id, status_, items, month='2026-03'):
        recalibration = StockRecalibration.objects.create(
            location_type='store', location_id=location_id, location_name=f'Store {location_id}',
            date=date(2026, 3, 2), month=month, status=status_)
        for key, difference, adjustment in items:
            RecalibrationItem.objects.create(recalibration=recalibration, item_key=key, item_name=key,
                                             system_quantity=100, actual_quantity=100 + difference,
                                             difference=difference, adjustment_type=adjustment)
        return recalibration

    def test_summary(self):
        self.make_count(1, 'approved', [('veg_momo', -12, 'wastage'), ('paneer_momo', 5, 'counting_error'),
                                        ('chicken_momo', 0, None)])
        self.make_count(2, 'pending', [('veg_momo', -3, 'counting_error')])
        self.make_count(3, 'rejected', [('veg_momo', -50, 'wastage')])
        self.make_count(4, 'approved', [('veg_momo', -7, 'wastage')], month='2026-02')

        response = self.client.get('/api/v1/recalibrations/wastage-report/', {'month': '2026-03'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 3)
        self.assertEqual(response.data['summary'], {
            'totalWastage': 12,
            'totalCountingErrors': 8,
            'totalRecalibrations': 2,
            'uniqueLocations': 2,
        })
