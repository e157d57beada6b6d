from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'investments'

router = DefaultRouter()
router.register(r'', views.InvestmentViewSet, basename='investment')

urlpatterns = [
    # GET  /api/investments/                                - List (own, or all for admins)
    # POST /api/investments/                                - Submit pending investment
    # GET  /api/investments/{id}/                           - Investment details
    # POST /api/investments/offline/                        - Record offline payment (admin)
    # POST /api/investments/{id}/approve/                   - Approve (admin)
    # POST /api/investments/{id}/approve-after-payment/     - Approve paid investment (admin)
    # POST /api/investments/{id}/reject/                    - Reject (admin)
    # POST /api/investments/{id}/release/                   - Release rejected lots (admin)
    # POST /api/investments/{id}/confirm-payment/           - Payment outcome (admin)
    # POST /api/investments/{id}/lease/                     - Lease decision
    # POST /api/investments/batch-approve/                  - Batch approval (admin)
    # GET  /api/investments/pending/                        - Awaiting approval (admin)
    # GET  /api/investments/portfolio/                      - Own approved investments
    path('', include(router.urls)),
]
