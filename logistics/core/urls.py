from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me,
    health, test_connection,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # Diagnostics
    path('health/', health, name='health'),
    path('test-connection/', test_connection, name='test-connection'),
]
