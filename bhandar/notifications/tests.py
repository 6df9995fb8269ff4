from django.test import TestCase
from rest_framework import status

from bhandar.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Notification
from .services import notify


class NotifyTests(TestCase):
    def test_notify_skips_missing_and_duplicate_recipients(self):
        user = TestDataFactory.create_user()
        created = notify([user, None, user], Notification.TYPE_LEAVE, 'Leave', 'Applied')
        self.assertEqual(len(created), 1)
        self.assertEqual(notify(None, Notification.TYPE_LEAVE, 'Leave', 'Applied'), [])

    def test_notify_accepts_single_user(self):
        user = TestDataFactory.create_user()
        notify(user, Notification.TYPE_TIMESHEET, 'Timesheet', 'Approved', related_id=7)
        notification = Notification.objects.get(recipient=user)
        self.assertEqual(notification.related_id, '7')
        self.assertFalse(notification.read)


class NotificationApiTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        notify(self.user, Notification.TYPE_LEAVE, 'One', 'First')
        notify(self.user, Notification.TYPE_LEAVE, 'Two', 'Second')

    def test_list_with_unread_count(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['notifications']), 2)
        self.assertEqual(response.data['unreadCount'], 2)

    def test_mark_read(self):
        notification = Notification.objects.filter(recipient=self.user).first()
        response = self.client.post(f'/api/v1/notifications/{notification.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/notifications/', {'unread': 'true'})
        self.assertEqual(len(response.data['notifications']), 1)
        self.assertEqual(response.data['unreadCount'], 1)

    def test_cannot_mark_someone_elses_notification(self):
        other = TestDataFactory.create_user()
        notify(other, Notification.TYPE_LEAVE, 'Other', 'Not yours')
        notification = Notification.objects.get(recipient=other)
        response = self.client.post(f'/api/v1/notifications/{notification.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self):
        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data, {'success': True, 'updated': 2})
        self.assertFalse(Notification.objects.filter(recipient=self.user, read=False).exists())
