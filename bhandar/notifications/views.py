import logging

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger('bhandar.notifications')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """Caller's notifications, newest first; ?unread=true limits to unread"""
    notifications = Notification.objects.filter(recipient=request.user)
    unread_count = notifications.filter(read=False).count()
    if request.query_params.get('unread') == 'true':
        notifications = notifications.filter(read=False)
    return Response({
        'notifications': NotificationSerializer(notifications[:200], many=True).data,
        'unreadCount': unread_count,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, recipient=request.user)
    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return Response(NotificationSerializer(notification).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = Notification.objects.filter(recipient=request.user, read=False).update(read=True)
    logger.info(f"User {request.user.username} marked {updated} notifications as read")
    return Response({'success': True, 'updated': updated})
