from django.urls import path
from .views import (
    LoginView, RefreshView, signup, user_me, fix_role,
    health, audit_log_list, clear_data,
)

urlpatterns = [
    # Auth endpoints
    path('auth/signup/', signup, name='signup'),
    path('auth/login/', LoginView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', RefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/fix-role/', fix_role, name='fix-role'),

    path('health/', health, name='health'),
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('clear-data/', clear_data, name='clear-data'),
]
