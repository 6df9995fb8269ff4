"""
Tests for accounts, authentication, audit logs and the API error shape
"""
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from bhandar.core.exceptions import validation_error_response
from bhandar.core.models import User, AuditLog
from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bhandar.core.utils import create_audit_log
from bhandar.hr.models import Employee
from bhandar.inventory.models import Overhead
from bhandar.sales.models import SalesRecord


class SignupTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_signup_cluster_head_returns_tokens(self):
        response = self.client.post('/api/v1/auth/signup/', {
            'email': 'Head@Example.com',
            'password': 'secret123',
            'name': 'Asha Rai',
            'role': 'cluster_head',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['email'], 'head@example.com')
        self.assertEqual(User.objects.get(email='head@example.com').role, 'cluster_head')

    def test_signup_rejects_unknown_role(self):
        response = self.client.post('/api/v1/auth/signup/', {
            'email': 'x@example.com', 'password': 'secret123', 'role': 'owner',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_second_cluster_head_signup_rejected(self):
        TestDataFactory.create_cluster_head()
        response = self.client.post('/api/v1/auth/signup/', {
            'email': 'intruder@example.com', 'password': 'secret123', 'role': 'cluster_head',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'role: A cluster head already exists')
        self.assertFalse(User.objects.filter(email='intruder@example.com').exists())

    def test_employee_signup_requires_employee_id(self):
        response = self.client.post('/api/v1/auth/signup/', {
            'email': 'emp@example.com', 'password': 'secret123', 'role': 'employee',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('employee_id', response.data)

    def test_employee_signup_links_employee_record(self):
        employee = TestDataFactory.create_employee(employee_id='BM007')
        response = self.client.post('/api/v1/auth/signup/', {
            'email': 'new.hire@example.com', 'password': 'secret123', 'role': 'employee', 'employee_id': 'BM007',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        employee.refresh_from_db()
        self.assertEqual(employee.email, 'new.hire@example.com')
        self.assertEqual(employee.user.email, 'new.hire@example.com')

    def test_duplicate_email_rejected(self):
        TestDataFactory.create_user(username='taken', email='taken@example.com')
        response = self.client.post('/api/v1/auth/signup/', {
            'email': 'TAKEN@example.com', 'password': 'secret123', 'role': 'manager',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = TestDataFactory.create_manager(username='ravi', email='ravi@example.com')
        self.employee = TestDataFactory.create_employee(employee_id='BM002', role='manager', user=self.user)

    def test_login_with_email_carries_role_claims(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'ravi@example.com', 'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], 'manager')
        self.assertEqual(token['employee_id'], 'BM002')
        self.assertEqual(response.data['user']['username'], 'ravi')

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'ravi', 'password': 'wrong',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)


class MeTests(TestCase):
    def test_me_includes_store_and_capabilities(self):
        manager = TestDataFactory.create_manager()
        store = TestDataFactory.create_store(manager=manager)
        client = AuthenticatedAPIClient().authenticate_user(manager)

        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['store_id'], store.id)
        self.assertTrue(response.data['can_record_sales'])
        self.assertFalse(response.data['can_approve_sales'])

    def test_me_requires_authentication(self):
        response = APIClient().get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)


class FixRoleTests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)

    def test_fix_role_updates_user(self):
        user = TestDataFactory.create_user(email='someone@example.com')
        response = self.client.post('/api/v1/auth/fix-role/', {'email': 'someone@example.com', 'role': 'manager'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.role, 'manager')
        self.assertTrue(AuditLog.objects.filter(model_name='User', object_id=str(user.id)).exists())

    def test_fix_role_unknown_user(self):
        response = self.client.post('/api/v1/auth/fix-role/', {'email': 'ghost@example.com', 'role': 'manager'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_fix_role_requires_staff(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_cluster_head())
        response = client.post('/api/v1/auth/fix-role/', {'email': 'a@example.com', 'role': 'manager'},
                               format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuditAndUtilityTests(TestCase):
    def test_health_is_public(self):
        response = APIClient().get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'status': 'ok'})

    def test_audit_logs_visible_to_cluster_head_only(self):
        head = TestDataFactory.create_cluster_head()
        create_audit_log(action='create', model_name='Store', object_id=1, user=head)

        manager_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        self.assertEqual(manager_client.get('/api/v1/audit-logs/').status_code, status.HTTP_403_FORBIDDEN)

        head_client = AuthenticatedAPIClient().authenticate_user(head)
        response = head_client.get('/api/v1/audit-logs/', {'model_name': 'Store'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_audit_log_skipped_without_required_fields(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))

    def test_clear_data_only_removes_callers_entries(self):
        manager = TestDataFactory.create_manager()
        other = TestDataFactory.create_manager()
        store = TestDataFactory.create_store()
        TestDataFactory.create_sales_record(store, user=manager)
        Overhead.objects.create(date='2026-01-02', category='fuel', amount='100.00', created_by=other)

        client = AuthenticatedAPIClient().authenticate_user(manager)
        response = client.delete('/api/v1/clear-data/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(SalesRecord.objects.filter(created_by=manager).exists())
        self.assertEqual(Overhead.objects.filter(created_by=other).count(), 1)

    def test_not_found_responses_carry_error_key(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.get('/api/v1/stores/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('error', response.data)

    def test_validation_errors_repeat_first_message_under_error(self):
        response = validation_error_response({'non_field_errors': ['Insufficient leave balance']})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient leave balance')
        response = validation_error_response({'reason': ['Rejection reason is required']})
        self.assertEqual(response.data, {'reason': ['Rejection reason is required'],
                                         'error': 'reason: Rejection reason is required'})
