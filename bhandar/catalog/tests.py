from django.test import TestCase
from rest_framework import status

from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bhandar.production.ledger import match_item_key
from .constants import DEFAULT_MOMO_ITEMS
from .models import InventoryItem, normalize_item_name


class NormalizeItemNameTests(TestCase):
    def test_collapses_whitespace_and_lowercases(self):
        self.assertEqual(normalize_item_name('  Chicken   Steam Momo '), 'chicken_steam_momo')
        self.assertEqual(normalize_item_name(None), '')

    def test_punctuation_matches_sales_rows(self):
        key = normalize_item_name('Veg-Kurkure')
        self.assertEqual(key, 'veg_kurkure')
        self.assertEqual(match_item_key('Veg-Kurkure Momos', {key}), key)


class InventoryItemTests(TestCase):
    def setUp(self):
        self.manager = TestDataFactory.create_manager()
        self.client = AuthenticatedAPIClient().authenticate_user(self.manager)

    def test_create_global_item_normalises_name(self):
        response = self.client.post('/api/v1/inventory-items/', {
            'name': 'Paneer Momo', 'display_name': 'Paneer Momo', 'category': 'finished_product',
            'unit': 'pieces', 'linked_entity_type': 'global', 'linked_entity_id': '12',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'paneer_momo')
        self.assertIsNone(response.data['linked_entity_id'])
        self.assertEqual(response.data['created_by'], self.manager.id)

    def test_scoped_item_requires_entity_id(self):
        response = self.client.post('/api/v1/inventory-items/', {
            'name': 'Cheese', 'display_name': 'Cheese', 'category': 'raw_material',
            'unit': 'kg', 'linked_entity_type': 'store',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('linked_entity_id', response.data)

    def test_duplicate_name_in_same_context_rejected(self):
        TestDataFactory.create_item(name='veg_momo')
        response = self.client.post('/api/v1/inventory-items/', {
            'name': 'VEG momo', 'display_name': 'Veg', 'category': 'finished_product', 'unit': 'pieces',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_name_allowed_in_other_store(self):
        TestDataFactory.create_item(name='cheese', category='raw_material', linked_entity_type='store',
                                    linked_entity_id='1')
        response = self.client.post('/api/v1/inventory-items/', {
            'name': 'cheese', 'display_name': 'Cheese', 'category': 'raw_material', 'unit': 'kg',
            'linked_entity_type': 'store', 'linked_entity_id': 2,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_list_scoped_items_include_globals(self):
        TestDataFactory.create_item(name='veg_momo')
        TestDataFactory.create_item(name='cheese', category='raw_material', linked_entity_type='store',
                                    linked_entity_id='1')
        TestDataFactory.create_item(name='butter', category='raw_material', linked_entity_type='store',
                                    linked_entity_id='2')

        response = self.client.get('/api/v1/inventory-items/', {'entityType': 'store', 'entityId': '1'})
        names = sorted(item['name'] for item in response.data)
        self.assertEqual(names, ['cheese', 'veg_momo'])

        response = self.client.get('/api/v1/inventory-items/', {'category': 'raw_material'})
        self.assertEqual(len(response.data), 2)

    def test_delete_is_soft(self):
        item = TestDataFactory.create_item()
        response = self.client.delete(f'/api/v1/inventory-items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertFalse(item.is_active)
        self.assertEqual(self.client.get('/api/v1/inventory-items/').data, [])

    def test_employee_cannot_create(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role='employee'))
        response = client.post('/api/v1/inventory-items/', {
            'name': 'x', 'display_name': 'x', 'category': 'raw_material', 'unit': 'kg',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_initialize_defaults_is_idempotent(self):
        response = self.client.post('/api/v1/inventory-items/initialize-defaults/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], len(DEFAULT_MOMO_ITEMS))

        response = self.client.post('/api/v1/inventory-items/initialize-defaults/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 0)
        self.assertEqual(response.data['skipped'], len(DEFAULT_MOMO_ITEMS))
        self.assertEqual(InventoryItem.objects.count(), len(DEFAULT_MOMO_ITEMS))

    def test_categories(self):
        response = self.client.get('/api/v1/inventory-categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('finished_product', response.data['itemCategories'])
        self.assertIn('lpg_gas', response.data['fixedCostCategories'])
