from datetime import date, time
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework import status

from bhandar.core.models import User
from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bhandar.notifications.models import Notification
from .models import Employee, Timesheet, Leave, Payout
from .services import next_employee_id, calculate_leave_balance, hours_between


class ServiceTests(TestCase):
    def test_next_employee_id_follows_highest_number(self):
        self.assertEqual(next_employee_id(), 'BM001')
        TestDataFactory.create_employee(employee_id='BM009')
        TestDataFactory.create_employee(employee_id='BM010')
        TestDataFactory.create_employee(employee_id='XYZ99')
        self.assertEqual(next_employee_id(), 'BM011')

    def test_leave_balance_accrues_monthly(self):
        today = date(2026, 5, 20)
        # Joined in March: March, April, May credited
        self.assertEqual(calculate_leave_balance(date(2026, 3, 10), 0, today), 12)
        self.assertEqual(calculate_leave_balance(date(2026, 3, 10), 5, today), 7)
        # Earlier joiners are credited from January
        self.assertEqual(calculate_leave_balance(date(2024, 8, 1), 0, today), 20)
        self.assertEqual(calculate_leave_balance(date(2026, 6, 1), 0, today), 0)
        self.assertEqual(calculate_leave_balance(date(2026, 5, 1), 9, today), 0)

    def test_hours_between(self):
        self.assertEqual(hours_between(time(9, 0), time(13, 30)), Decimal('4.50'))
        self.assertLess(hours_between(time(18, 0), time(9, 0)), 0)


class EmployeeTests(TestCase):
    def setUp(self):
        self.head_user = TestDataFactory.create_cluster_head()
        self.client = AuthenticatedAPIClient().authenticate_user(self.head_user)

    def test_create_assigns_next_id_and_login(self):
        TestDataFactory.create_employee(employee_id='BM004')
        response = self.client.post('/api/v1/employees/', {
            'name': 'Sonam Lepcha', 'email': 'Sonam@Example.com', 'role': 'employee', 'password': 'momo1234',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['employee_id'], 'BM005')
        self.assertTrue(response.data['has_login'])
        self.assertNotIn('password', response.data)
        user = User.objects.get(email='sonam@example.com')
        self.assertEqual(user.role, 'employee')
        self.assertTrue(user.check_password('momo1234'))

    def test_employee_id_is_immutable(self):
        employee = TestDataFactory.create_employee(employee_id='BM001')
        response = self.client.patch(f'/api/v1/employees/{employee.id}/', {'employee_id': 'BM777', 'phone': '99'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        employee.refresh_from_db()
        self.assertEqual(employee.employee_id, 'BM001')
        self.assertEqual(employee.phone, '99')

    def test_manager_field_must_point_to_manager(self):
        not_a_manager = TestDataFactory.create_employee()
        response = self.client.post('/api/v1/employees/', {
            'name': 'Pema', 'role': 'employee', 'manager': not_a_manager.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('manager', response.data)

    def test_manager_creating_employee_becomes_their_manager(self):
        manager_user = TestDataFactory.create_manager()
        manager = TestDataFactory.create_employee(role='manager', user=manager_user)
        client = AuthenticatedAPIClient().authenticate_user(manager_user)
        response = client.post('/api/v1/employees/', {'name': 'Dawa', 'role': 'employee'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['manager'], manager.id)

    def test_only_cluster_head_deletes(self):
        employee = TestDataFactory.create_employee()
        manager_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        self.assertEqual(manager_client.delete(f'/api/v1/employees/{employee.id}/').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.delete(f'/api/v1/employees/{employee.id}/').status_code,
                         status.HTTP_204_NO_CONTENT)

    def test_next_id_endpoint(self):
        response = self.client.get('/api/v1/employees/next-id/')
        self.assertEqual(response.data, {'employee_id': 'BM001'})

    def test_search_filter(self):
        TestDataFactory.create_employee(employee_id='BM001', name='Tashi Sherpa')
        TestDataFactory.create_employee(employee_id='BM002', name='Karma Bhutia')
        response = self.client.get('/api/v1/employees/', {'search': 'tashi'})
        self.assertEqual([row['employee_id'] for row in response.data], ['BM001'])


class HierarchyTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_cluster_head())
        self.head = TestDataFactory.create_employee(role='cluster_head')
        self.manager = TestDataFactory.create_employee(role='manager')
        self.employee = TestDataFactory.create_employee()

    def test_assign_manager(self):
        response = self.client.put(f'/api/v1/employees/{self.employee.id}/assign-manager/',
                                   {'manager': self.manager.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.employee.refresh_from_db()
        self.assertEqual(self.employee.manager, self.manager)

        response = self.client.get(f'/api/v1/employees/manager/{self.manager.id}/')
        self.assertEqual(len(response.data), 1)

    def test_assign_manager_rejects_non_manager(self):
        other = TestDataFactory.create_employee()
        response = self.client.put(f'/api/v1/employees/{self.employee.id}/assign-manager/',
                                   {'manager': other.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_cluster_head_only_for_managers(self):
        response = self.client.put(f'/api/v1/employees/{self.employee.id}/assign-cluster-head/',
                                   {'cluster_head': self.head.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(f'/api/v1/employees/{self.manager.id}/assign-cluster-head/',
                                   {'cluster_head': self.head.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/employees/cluster-head/{self.head.id}/managers/')
        self.assertEqual([row['id'] for row in response.data], [self.manager.id])

    def test_manager_cannot_reassign(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.put(f'/api/v1/employees/{self.employee.id}/assign-manager/',
                              {'manager': self.manager.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_organizational_hierarchy(self):
        self.manager.cluster_head = self.head
        self.manager.save()
        self.employee.manager = self.manager
        self.employee.save()
        stray = TestDataFactory.create_employee()

        response = self.client.get('/api/v1/organizational-hierarchy/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tree = response.data['hierarchy']
        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0]['managers'][0]['id'], self.manager.id)
        self.assertEqual(tree[0]['managers'][0]['employees'][0]['id'], self.employee.id)
        self.assertEqual(response.data['unassignedManagers'], [])
        self.assertEqual([e['id'] for e in response.data['unassignedEmployees']], [stray.id])
        self.assertEqual(response.data['stats']['totalEmployees'], 2)

    def test_cluster_head_list_counts_managers(self):
        self.manager.cluster_head = self.head
        self.manager.save()
        response = self.client.get('/api/v1/cluster-heads/')
        self.assertEqual(response.data[0]['manager_count'], 1)


class SetupClusterHeadTests(TestCase):
    def test_first_cluster_head_then_conflict(self):
        client = AuthenticatedAPIClient()
        payload = {'name': 'Nima Dorjee', 'email': 'nima@example.com', 'password': 'firstrun1'}
        response = client.post('/api/v1/setup-cluster-head/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['employee']['role'], 'cluster_head')
        self.assertEqual(User.objects.get(email='nima@example.com').role, 'cluster_head')

        payload['email'] = 'second@example.com'
        response = client.post('/api/v1/setup-cluster-head/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)


class TimesheetTests(TestCase):
    def setUp(self):
        self.manager_user = TestDataFactory.create_manager()
        self.manager = TestDataFactory.create_employee(role='manager', user=self.manager_user)
        self.employee_user = TestDataFactory.create_user(role='employee')
        self.employee = TestDataFactory.create_employee(manager=self.manager, user=self.employee_user)
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee_user)

    def test_employee_logs_own_hours(self):
        other = TestDataFactory.create_employee()
        response = self.client.post('/api/v1/timesheets/', {
            'employee': other.id, 'date': '2026-03-02', 'start_time': '09:00', 'end_time': '17:30',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['employee'], self.employee.id)
        self.assertEqual(Timesheet.objects.get().total_hours, Decimal('8.50'))

    def test_minimum_hours(self):
        response = self.client.post('/api/v1/timesheets/', {
            'date': '2026-03-02', 'start_time': '09:00', 'end_time': '12:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('total_hours', response.data)

    def test_end_before_start(self):
        response = self.client.post('/api/v1/timesheets/', {
            'date': '2026-03-02', 'start_time': '17:00', 'end_time': '09:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_time', response.data)

    def test_no_hours_on_leave_day(self):
        TestDataFactory.create_leave(self.employee, date(2026, 3, 2), status='approved')
        response = self.client.post('/api/v1/timesheets/', {
            'date': '2026-03-02', 'start_time': '09:00', 'end_time': '17:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date', response.data)

    def test_resubmission_replaces_entry_and_resets_status(self):
        timesheet = TestDataFactory.create_timesheet(self.employee, date(2026, 3, 2), status='approved')
        response = self.client.post('/api/v1/timesheets/', {
            'date': '2026-03-02', 'start_time': '10:00', 'end_time': '16:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        timesheet.refresh_from_db()
        self.assertEqual(timesheet.status, 'pending')
        self.assertEqual(timesheet.total_hours, Decimal('6.00'))
        self.assertEqual(Timesheet.objects.count(), 1)

    def test_bulk_save_is_all_or_nothing(self):
        response = self.client.post('/api/v1/timesheets/bulk/', {'timesheets': [
            {'date': '2026-03-02', 'start_time': '09:00', 'end_time': '17:00'},
            {'date': '2026-03-03', 'start_time': '09:00', 'end_time': '10:00'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('1', response.data['errors'])
        self.assertFalse(Timesheet.objects.exists())

        response = self.client.post('/api/v1/timesheets/bulk/', {'timesheets': [
            {'date': '2026-03-02', 'start_time': '09:00', 'end_time': '17:00'},
            {'date': '2026-03-03', 'start_time': '09:00', 'end_time': '13:00'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Timesheet.objects.count(), 2)

    def test_manager_approves_report_and_employee_is_notified(self):
        timesheet = TestDataFactory.create_timesheet(self.employee, date(2026, 3, 2))
        manager_client = AuthenticatedAPIClient().authenticate_user(self.manager_user)
        response = manager_client.post(f'/api/v1/timesheets/{timesheet.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertTrue(Notification.objects.filter(recipient=self.employee_user,
                                                    type=Notification.TYPE_TIMESHEET).exists())

        response = manager_client.post(f'/api/v1/timesheets/{timesheet.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_manager_cannot_review(self):
        timesheet = TestDataFactory.create_timesheet(self.employee, date(2026, 3, 2))
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_manager())
        response = client.post(f'/api/v1/timesheets/{timesheet.id}/reject/', {'reason': 'No'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_sees_only_own_timesheets(self):
        TestDataFactory.create_timesheet(self.employee, date(2026, 3, 2))
        TestDataFactory.create_timesheet(TestDataFactory.create_employee(), date(2026, 3, 2))
        response = self.client.get('/api/v1/timesheets/')
        self.assertEqual(len(response.data), 1)

        manager_client = AuthenticatedAPIClient().authenticate_user(self.manager_user)
        self.assertEqual(len(manager_client.get('/api/v1/timesheets/').data), 1)


@patch('bhandar.core.timeutils.today', return_value=date(2026, 3, 15))
class LeaveTests(TestCase):
    def setUp(self):
        self.manager_user = TestDataFactory.create_manager()
        self.manager = TestDataFactory.create_employee(role='manager', user=self.manager_user)
        self.employee_user = TestDataFactory.create_user(role='employee')
        self.employee = TestDataFactory.create_employee(manager=self.manager, user=self.employee_user,
                                                        joining_date=date(2026, 3, 1))
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee_user)

    def test_apply_notifies_manager(self, _today):
        response = self.client.post('/api/v1/leaves/', {'leave_date': '2026-03-20', 'reason': 'Puja'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertTrue(Notification.objects.filter(recipient=self.manager_user,
                                                    type=Notification.TYPE_LEAVE).exists())

    def test_duplicate_date_rejected(self, _today):
        TestDataFactory.create_leave(self.employee, date(2026, 3, 20))
        response = self.client.post('/api/v1/leaves/', {'leave_date': '2026-03-20', 'reason': 'Again'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('leave_date', response.data)

    def test_rejected_leave_frees_the_date(self, _today):
        TestDataFactory.create_leave(self.employee, date(2026, 3, 20), status='rejected')
        response = self.client.post('/api/v1/leaves/', {'leave_date': '2026-03-20', 'reason': 'Again'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_balance_exhausted(self, _today):
        for day in (2, 3, 4, 5):
            TestDataFactory.create_leave(self.employee, date(2026, 3, day), status='approved')
        response = self.client.get(f'/api/v1/leaves/balance/{self.employee.employee_id}/')
        self.assertEqual(response.data, {'employee_id': self.employee.employee_id, 'balance': 0})

        response = self.client.post('/api/v1/leaves/', {'leave_date': '2026-03-25', 'reason': 'Trip'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient leave balance')

    def test_balance_of_another_employee_forbidden(self, _today):
        colleague = TestDataFactory.create_employee(manager=self.manager, joining_date=date(2026, 1, 1))
        response = self.client.get(f'/api/v1/leaves/balance/{colleague.employee_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        manager_client = AuthenticatedAPIClient().authenticate_user(self.manager_user)
        response = manager_client.get(f'/api/v1/leaves/balance/{colleague.employee_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_reject_requires_reason(self, _today):
        leave = TestDataFactory.create_leave(self.employee, date(2026, 3, 20))
        manager_client = AuthenticatedAPIClient().authenticate_user(self.manager_user)
        response = manager_client.post(f'/api/v1/leaves/{leave.id}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = manager_client.post(f'/api/v1/leaves/{leave.id}/reject/', {'reason': 'Short staffed'},
                                       format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        leave.refresh_from_db()
        self.assertEqual(leave.status, Leave.STATUS_REJECTED)
        self.assertEqual(leave.rejected_by, self.manager_user)


class PayoutTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_cluster_head())
        self.first = TestDataFactory.create_employee(employee_id='BM001')
        self.second = TestDataFactory.create_employee(employee_id='BM002')

    def test_batch_create_and_summary(self):
        response = self.client.post('/api/v1/payouts/', {'payouts': [
            {'employee': self.first.id, 'date': '2026-03-01', 'amount': '5000.00'},
            {'employee': self.first.id, 'date': '2026-03-15', 'amount': '2500.00'},
            {'employee': self.second.id, 'date': '2026-03-01', 'amount': '4000.00'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 3)

        response = self.client.get('/api/v1/payouts/summary/')
        self.assertEqual(response.data[0]['employee_code'], 'BM001')
        self.assertEqual(response.data[0]['total'], Decimal('7500.00'))
        self.assertEqual(response.data[0]['count'], 2)

    def test_invalid_row_rejects_batch(self):
        response = self.client.post('/api/v1/payouts/', {'payouts': [
            {'employee': self.first.id, 'date': '2026-03-01', 'amount': '5000.00'},
            {'employee': self.second.id, 'date': '2026-03-01', 'amount': '-1'},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Payout.objects.exists())

    def test_employee_cannot_record(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role='employee'))
        response = client.post('/api/v1/payouts/', {'payouts': [{'employee': self.first.id}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_sees_only_own_payouts(self):
        user = TestDataFactory.create_user(role='employee')
        self.first.user = user
        self.first.save()
        Payout.objects.create(employee=self.first, date=date(2026, 3, 1), amount=Decimal('5000.00'))
        other = Payout.objects.create(employee=self.second, date=date(2026, 3, 1), amount=Decimal('4000.00'))
        client = AuthenticatedAPIClient().authenticate_user(user)

        response = client.get('/api/v1/payouts/summary/')
        self.assertEqual([row['employee_code'] for row in response.data], ['BM001'])
        response = client.get('/api/v1/payouts/')
        self.assertEqual(len(response.data), 1)
        response = client.get(f'/api/v1/payouts/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
