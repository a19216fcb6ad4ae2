"""
URL routing for purchase order endpoints.
"""
from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    path('purchase-orders/', views.PurchaseOrderListCreateView.as_view(), name='purchase-order-list'),
    path('purchase-orders/stats/', views.PurchaseOrderStatsView.as_view(), name='purchase-order-stats'),
    path('purchase-orders/<int:pk>/', views.PurchaseOrderDetailView.as_view(), name='purchase-order-detail'),
    path('purchase-orders/<int:pk>/status/', views.PurchaseOrderStatusView.as_view(), name='purchase-order-status'),
]
