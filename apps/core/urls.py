# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === USERS ===
    path('api/users/search/', views.search_users, name='search_users'),

    # === MONITORING ===
    path('health/', views.health_check, name='health'),
]
