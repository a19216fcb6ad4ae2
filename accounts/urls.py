"""
URL routing for account API endpoints.
"""
from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    path('auth/me/', views.CurrentOperatorView.as_view(), name='me'),
    path('users/', views.UserListCreateView.as_view(), name='user-list'),
    path('users/<int:pk>/', views.UserDetailView.as_view(), name='user-detail'),
    path('users/<int:pk>/toggle-active/', views.UserToggleActiveView.as_view(), name='user-toggle-active'),
]
