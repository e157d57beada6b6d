from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'users'

router = DefaultRouter()
router.register(r'users', views.UserAdminViewSet, basename='user')

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # Current user
    path('user/', views.get_current_user, name='current-user'),
    path('user/update/', views.update_profile, name='update-profile'),
    path('user/role/', views.current_role, name='current-role'),
    path('user/documents/', views.my_documents, name='my-documents'),
    path('lease-agreement/', views.lease_agreement, name='lease-agreement'),

    # Admin user management
    # GET    /api/auth/users/                         - List users (?kyc_status=)
    # GET    /api/auth/users/{id}/                    - User details
    # DELETE /api/auth/users/{id}/                    - Delete (anonymize) user
    # POST   /api/auth/users/{id}/kyc/                - KYC decision
    # POST   /api/auth/users/{id}/role/               - Assign role
    # GET    /api/auth/users/{id}/can-remove-admin/   - Demotion check
    # GET    /api/auth/users/{id}/documents/          - KYC documents
    # POST   /api/auth/users/{id}/cleanup-documents/  - Remove unusable documents
    # POST   /api/auth/users/bulk-kyc/                - Bulk KYC decision
    # GET    /api/auth/users/admins/                  - Admin users
    # GET    /api/auth/users/admin-counts/            - Admin counts
    path('', include(router.urls)),
]
