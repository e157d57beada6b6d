from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'parking'

router = DefaultRouter()
router.register(r'', views.ParkingLotViewSet, basename='parkinglot')

urlpatterns = [
    # GET    /api/parking-lots/                    - List lots (?available=true)
    # POST   /api/parking-lots/                    - Create lot (admin)
    # GET    /api/parking-lots/{id}/               - Lot details
    # PATCH  /api/parking-lots/{id}/               - Update lot (admin)
    # DELETE /api/parking-lots/{id}/               - Delete lot (admin)
    # GET    /api/parking-lots/{id}/availability/  - Inventory counters
    path('', include(router.urls)),
]
