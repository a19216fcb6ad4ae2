"""
URL routing for report endpoints.
"""
from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('reports/dashboard/', views.DashboardView.as_view(), name='dashboard'),
    path('reports/daily-sales/', views.DailySalesView.as_view(), name='daily-sales'),
    path('reports/top-products/', views.TopProductsView.as_view(), name='top-products'),
    path('reports/product-profits/', views.ProductProfitsView.as_view(), name='product-profits'),
    path('reports/daily-profit/', views.DailyProfitView.as_view(), name='daily-profit'),
    path('reports/stock-alerts/', views.StockAlertsView.as_view(), name='stock-alerts'),
]
