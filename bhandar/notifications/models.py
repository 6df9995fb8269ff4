from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app message for a single user"""
    TYPE_PRODUCTION_REQUEST = 'production_request'
    TYPE_REQUEST_STATUS = 'request_status'
    TYPE_REQUEST_DELAYED = 'request_delayed'
    TYPE_SALES_APPROVAL = 'sales_approval'
    TYPE_RECALIBRATION = 'recalibration'
    TYPE_TIMESHEET = 'timesheet'
    TYPE_LEAVE = 'leave'
    TYPE_CHOICES = [
        (TYPE_PRODUCTION_REQUEST, 'Production Request'),
        (TYPE_REQUEST_STATUS, 'Request Status'),
        (TYPE_REQUEST_DELAYED, 'Request Delayed'),
        (TYPE_SALES_APPROVAL, 'Sales Approval'),
        (TYPE_RECALIBRATION, 'Recalibration'),
        (TYPE_TIMESHEET, 'Timesheet'),
        (TYPE_LEAVE, 'Leave'),
    ]

    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    related_id = models.CharField(max_length=100, blank=True, null=True)
    related_date = models.DateField(null=True, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.title} -> {self.recipient}"

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'read']),
        ]
