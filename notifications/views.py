from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from notifications.serializers import NotificationSerializer
from notifications.services import notification_feed


class NotificationListView(generics.ListAPIView):
    """The caller's notifications, newest first. ?unread=true for unread only."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        unread_only = self.request.query_params.get('unread', '').lower() == 'true'
        return notification_feed.list_for(self.request.user, unread_only=unread_only)


class UnreadCountView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({'unread_count': notification_feed.unread_count(request.user)})


class MarkReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        notification = notification_feed.mark_read(request.user, pk)
        return Response(NotificationSerializer(notification).data)


class MarkAllReadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        updated = notification_feed.mark_all_read(request.user)
        return Response({'message': 'All notifications marked as read', 'updated': updated})
