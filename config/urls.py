"""
URL configuration for the Retail Back Office API.
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Health check endpoint for container orchestration."""
    return JsonResponse({'status': 'healthy', 'service': 'retail-backoffice-api'})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health-check'),
    path('api/', include('accounts.urls')),
    path('api/', include('inventory.urls')),
    path('api/', include('directory.urls')),
    path('api/', include('quotes.urls')),
    path('api/', include('sales.urls')),
    path('api/', include('orders.urls')),
    path('api/', include('expenses.urls')),
    path('api/', include('reports.urls')),
]
