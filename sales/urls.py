"""
URL routing for sale endpoints.
"""
from django.urls import path
from . import views

app_name = 'sales'

urlpatterns = [
    path('sales/', views.SaleListCreateView.as_view(), name='sale-list'),
    path('sales/<int:pk>/', views.SaleDetailView.as_view(), name='sale-detail'),
]
