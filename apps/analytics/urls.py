from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Admin statistics
    path('system-stats/', views.system_stats, name='system-stats'),
    path('admin/', views.admin_analytics, name='admin-analytics'),
    path('dashboard/', views.dashboard, name='dashboard'),

    # Portfolio
    path('portfolio/', views.portfolio_summary, name='my-portfolio'),  # Current user
    path('user/<uuid:user_id>/portfolio/', views.portfolio_summary, name='user-portfolio'),
]
