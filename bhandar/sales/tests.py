from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework import status

from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bhandar.notifications.models import Notification
from .models import SalesRecord, ItemSale
from .serializers import sanitize_item_sale


class SalesRecordTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.head = TestDataFactory.create_cluster_head()
        self.store = TestDataFactory.create_store(manager=self.manager)
        self.manager_client = AuthenticatedAPIClient().authenticate_user(self.manager)
        self.head_client = AuthenticatedAPIClient().authenticate_user(self.head)

    def record_sales(self, **overrides):
        data = {
            'date': '2026-03-02', 'store': self.store.id, 'offline_sales': '5000.00', 'cash_amount': '3000.00',
            'paytm_amount': '2000.00', 'online_sales': '1500.00', 'online_sales_commission': '300.00',
            'employee_salary': '800.00', 'actual_cash_in_hand': '2950.00',
        }
        data.update(overrides)
        return self.manager_client.post('/api/v1/sales/', data, format='json')

    def test_manager_records_pending_sales(self):
        response = self.record_sales()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['approval_status'], 'pending')
        record = SalesRecord.objects.get()
        self.assertEqual(record.gross_sales, Decimal('6500.00'))
        self.assertEqual(record.net_sales, Decimal('6200.00'))
        self.assertEqual(record.cash_discrepancy, Decimal('-50.00'))

    def test_duplicate_store_date_rejected(self):
        self.record_sales()
        response = self.record_sales(offline_sales='10.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_amounts_rejected_except_offset(self):
        response = self.record_sales(online_sales='-1.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.record_sales(cash_offset='-25.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_employee_cannot_record_sales(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role='employee'))
        response = client.post('/api/v1/sales/', {'date': '2026-03-02', 'store': self.store.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cluster_head_approves_and_creator_is_notified(self):
        record_id = self.record_sales().data['id']
        response = self.manager_client.post(f'/api/v1/sales/{record_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.head_client.post(f'/api/v1/sales/{record_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['approval_status'], 'approved')
        self.assertEqual(response.data['approved_by'], self.head.id)
        notification = Notification.objects.get(recipient=self.manager)
        self.assertEqual(notification.type, Notification.TYPE_SALES_APPROVAL)

        response = self.head_client.post(f'/api/v1/sales/{record_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_requires_reason(self):
        record_id = self.record_sales().data['id']
        response = self.head_client.post(f'/api/v1/sales/{record_id}/reject/', {'reason': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'reason: Rejection reason is required')

        response = self.head_client.post(f'/api/v1/sales/{record_id}/reject/', {'reason': 'Cash short'},
                                         format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record = SalesRecord.objects.get(pk=record_id)
        self.assertEqual(record.approval_status, 'rejected')
        self.assertEqual(record.rejection_reason, 'Cash short')

    def test_editing_approved_record_resets_approval(self):
        record_id = self.record_sales().data['id']
        self.head_client.post(f'/api/v1/sales/{record_id}/approve/')

        response = self.manager_client.patch(f'/api/v1/sales/{record_id}/', {'offline_sales': '5200.00'},
                                             format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['approval_status'], 'pending')
        self.assertIsNone(response.data['approved_by'])

    def test_list_filters_by_status(self):
        record_id = self.record_sales().data['id']
        self.record_sales(date='2026-03-03')
        self.head_client.post(f'/api/v1/sales/{record_id}/approve/')
        response = self.head_client.get('/api/v1/sales/', {'approval_status': 'approved'})
        self.assertEqual([row['id'] for row in response.data], [record_id])

    def test_summary_totals(self):
        self.record_sales()
        self.record_sales(date='2026-03-03', offline_sales='1000.00', online_sales='0.00',
                          online_sales_commission='0.00', employee_salary='0.00', actual_cash_in_hand=None)
        response = self.head_client.get('/api/v1/sales/summary/', {'date_from': '2026-03-01',
                                                                   'date_to': '2026-03-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['stores']), 1)
        self.assertEqual(response.data['stores'][0]['days'], 2)
        self.assertEqual(response.data['totals']['gross'], Decimal('7500.00'))
        self.assertEqual(response.data['totals']['net'], Decimal('7200.00'))
        self.assertEqual(response.data['totals']['salary'], Decimal('800.00'))

    def test_summary_rejects_inverted_range(self):
        response = self.head_client.get('/api/v1/sales/summary/', {'date_from': '2026-03-10',
                                                                   'date_to': '2026-03-01'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ItemSaleTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.store = TestDataFactory.create_store(manager=self.manager)
        self.client = AuthenticatedAPIClient().authenticate_user(self.manager)

    @patch('bhandar.core.timeutils.today', return_value=date(2026, 3, 15))
    def test_sanitize_fills_defaults(self, _today):
        fields = sanitize_item_sale({'quantity': 'abc', 'revenue': '120.5'}, 'weekly')
        self.assertEqual(fields['item_name'], 'Unknown')
        self.assertEqual(fields['quantity'], Decimal('0'))
        self.assertEqual(fields['revenue'], Decimal('120.5'))
        self.assertEqual(fields['date'], date(2026, 3, 15))
        self.assertEqual(fields['period'], 'weekly')

        fields = sanitize_item_sale({'itemName': 'Veg Momo', 'date': '2026-03-01', 'period': 'daily'})
        self.assertEqual(fields['item_name'], 'Veg Momo')
        self.assertEqual(fields['period'], 'daily')

    def test_bulk_upload(self):
        response = self.client.post('/api/v1/item-sales/', {
            'period': 'daily',
            'salesData': [
                {'itemName': 'Veg Momo', 'quantity': 40, 'revenue': 2400, 'date': '2026-03-02',
                 'store': self.store.id},
                {'itemName': 'Chicken Momo', 'quantity': '25', 'revenue': '1750', 'date': '2026-03-02',
                 'store': 99999},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(ItemSale.objects.get(item_name='Veg Momo').store, self.store)
        self.assertIsNone(ItemSale.objects.get(item_name='Chicken Momo').store)

    def test_bulk_upload_requires_rows(self):
        response = self.client.post('/api/v1/item-sales/', {'salesData': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/item-sales/', {'salesData': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_clears_all_rows(self):
        TestDataFactory.create_item_sale('Veg Momo', 10, date(2026, 3, 1), self.store)
        TestDataFactory.create_item_sale('Veg Momo', 12, date(2026, 3, 2), self.store)
        response = self.client.delete('/api/v1/item-sales/')
        self.assertEqual(response.data, {'success': True, 'deleted': 2})
        self.assertFalse(ItemSale.objects.exists())
