from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import StockPurchase, Overhead, FixedCost


class StockPurchaseTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.store = TestDataFactory.create_store(manager=self.manager)
        self.client = AuthenticatedAPIClient().authenticate_user(self.manager)

    def purchase(self, **overrides):
        data = {
            'date': '2026-03-02', 'category': 'fresh_produce', 'item_name': 'Onion', 'quantity': '5',
            'unit': 'kg', 'cost_per_unit': '40.00', 'store': self.store.id,
        }
        data.update(overrides)
        return self.client.post('/api/v1/inventory/', data, format='json')

    def test_total_defaults_to_quantity_times_rate(self):
        response = self.purchase()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        purchase = StockPurchase.objects.get()
        self.assertEqual(purchase.total_cost, Decimal('200.00'))
        self.assertEqual(purchase.cash_amount, Decimal('200.00'))
        self.assertEqual(purchase.online_amount, Decimal('0.00'))
        self.assertEqual(purchase.created_by, self.manager)

    def test_online_payment_moves_total_to_online(self):
        self.purchase(payment_method='online')
        purchase = StockPurchase.objects.get()
        self.assertEqual(purchase.cash_amount, Decimal('0.00'))
        self.assertEqual(purchase.online_amount, Decimal('200.00'))

    def test_split_payment_must_match_total(self):
        response = self.purchase(payment_method='both', cash_amount='100.00', online_amount='50.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment_method', response.data)

        response = self.purchase(payment_method='both', cash_amount='120.00', online_amount='80.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_unknown_category_rejected(self):
        response = self.purchase(category='jewellery')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filters(self):
        self.purchase(date='2026-03-01')
        self.purchase(date='2026-03-10', item_name='Cabbage')
        response = self.client.get('/api/v1/inventory/', {'date_from': '2026-03-05'})
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/inventory/', {'item_name': 'onion'})
        self.assertEqual(response.data[0]['item_name'], 'Onion')

    def test_employee_cannot_record_purchase(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role='employee'))
        response = client.post('/api/v1/inventory/', {'date': '2026-03-02'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_and_delete(self):
        self.purchase()
        purchase = StockPurchase.objects.get()
        response = self.client.patch(f'/api/v1/inventory/{purchase.id}/', {'notes': 'market rate'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.delete(f'/api/v1/inventory/{purchase.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(StockPurchase.objects.exists())


class OverheadTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient().authenticate_user(self.manager)

    def test_personal_expense_needs_employee(self):
        response = self.client.post('/api/v1/overheads/', {
            'date': '2026-03-02', 'category': 'personal_expense', 'amount': '150.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('employee', response.data)

        employee = TestDataFactory.create_employee()
        response = self.client.post('/api/v1/overheads/', {
            'date': '2026-03-02', 'category': 'personal_expense', 'amount': '150.00', 'employee': employee.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['employee_name'], employee.name)

    def test_employee_dropped_for_other_categories(self):
        employee = TestDataFactory.create_employee()
        self.client.post('/api/v1/overheads/', {
            'date': '2026-03-02', 'category': 'fuel', 'amount': '300.00', 'employee': employee.id,
        }, format='json')
        self.assertIsNone(Overhead.objects.get().employee)

    def test_amount_must_be_positive(self):
        response = self.client.post('/api/v1/overheads/', {
            'date': '2026-03-02', 'category': 'fuel', 'amount': '0',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class FixedCostTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_cluster_head())

    def test_lpg_amount_from_units(self):
        response = self.client.post('/api/v1/fixed-costs/', {
            'date': '2026-03-02', 'category': 'lpg_gas', 'units': '2', 'unit_price': '950.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(FixedCost.objects.get().amount, Decimal('1901.00'))

    def test_rent_requires_amount(self):
        response = self.client.post('/api/v1/fixed-costs/', {'date': '2026-03-02', 'category': 'rent'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)
