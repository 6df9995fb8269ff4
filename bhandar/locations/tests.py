from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from bhandar.core.models import AuditLog
from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .cache import STORE_LIST_KEY
from .models import Store


class StoreTests(TestCase):
    def setUp(self):
        cache.clear()
        self.head = TestDataFactory.create_cluster_head()
        self.client = AuthenticatedAPIClient().authenticate_user(self.head)

    def test_cluster_head_creates_store(self):
        response = self.client.post('/api/v1/stores/', {'name': 'Lake Road', 'code': 'LR01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Store.objects.filter(code='LR01').exists())
        self.assertTrue(AuditLog.objects.filter(model_name='Store', action='create').exists())

    def test_manager_cannot_create_store(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.post('/api/v1/stores/', {'name': 'Lake Road', 'code': 'LR01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)

    def test_duplicate_code_rejected(self):
        TestDataFactory.create_store(code='LR01')
        response = self.client.post('/api/v1/stores/', {'name': 'Another', 'code': 'LR01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data)
        self.assertTrue(response.data['error'].startswith('code: '))

    def test_store_list_is_cached_and_invalidated_on_save(self):
        TestDataFactory.create_store(name='First')
        response = self.client.get('/api/v1/stores/')
        self.assertEqual(len(response.data), 1)
        self.assertIsNotNone(cache.get(STORE_LIST_KEY))

        TestDataFactory.create_store(name='Second')
        self.assertIsNone(cache.get(STORE_LIST_KEY))
        self.assertEqual(len(self.client.get('/api/v1/stores/').data), 2)

    def test_inactive_stores_hidden_by_default(self):
        store = TestDataFactory.create_store()
        store.is_active = False
        store.save()
        self.assertEqual(len(self.client.get('/api/v1/stores/').data), 0)
        response = self.client.get('/api/v1/stores/', {'include_inactive': 'true'})
        self.assertEqual(len(response.data), 1)

    def test_assign_manager_requires_manager_role(self):
        store = TestDataFactory.create_store()
        employee_user = TestDataFactory.create_user(role='employee')
        response = self.client.post(f'/api/v1/stores/{store.id}/assign-manager/', {'manager': employee_user.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        manager = TestDataFactory.create_manager()
        response = self.client.post(f'/api/v1/stores/{store.id}/assign-manager/', {'manager': manager.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        store.refresh_from_db()
        self.assertEqual(store.manager, manager)

    def test_assign_production_house(self):
        store = TestDataFactory.create_store()
        house = TestDataFactory.create_production_house()
        response = self.client.post(f'/api/v1/stores/{store.id}/assign-production-house/',
                                    {'production_house': house.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['production_house_name'], house.name)

        response = self.client.post(f'/api/v1/stores/{store.id}/assign-production-house/',
                                    {'production_house': 9999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_store(self):
        store = TestDataFactory.create_store()
        response = self.client.delete(f'/api/v1/stores/{store.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Store.objects.filter(pk=store.id).exists())


class ProductionHouseTests(TestCase):
    def setUp(self):
        self.head = TestDataFactory.create_cluster_head()
        self.client = AuthenticatedAPIClient().authenticate_user(self.head)

    def test_create_and_list(self):
        response = self.client.post('/api/v1/production-houses/', {'name': 'Main Kitchen', 'code': 'MK'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        house_id = response.data['id']

        response = self.client.get('/api/v1/production-houses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['id'], house_id)
        self.assertEqual(response.data[0]['store_count'], 0)

    def test_assign_head(self):
        house = TestDataFactory.create_production_house()
        chef = TestDataFactory.create_user()
        response = self.client.post(f'/api/v1/production-houses/{house.id}/assign-head/',
                                    {'production_head': chef.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        house.refresh_from_db()
        self.assertEqual(house.production_head, chef)

    def test_manager_cannot_modify(self):
        house = TestDataFactory.create_production_house()
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.patch(f'/api/v1/production-houses/{house.id}/', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
