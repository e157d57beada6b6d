from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'notifications'

router = DefaultRouter()
router.register(r'', views.NotificationViewSet, basename='notification')

urlpatterns = [
    # GET    /api/notifications/                - List (?unread=true, ?type=)
    # DELETE /api/notifications/{id}/           - Delete one
    # POST   /api/notifications/{id}/read/      - Mark read
    # POST   /api/notifications/read-all/       - Mark all read
    # GET    /api/notifications/unread-count/   - Unread and total counts
    # DELETE /api/notifications/clear/          - Delete all
    path('', include(router.urls)),
]
