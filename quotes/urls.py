"""
URL routing for quote endpoints.
"""
from django.urls import path
from . import views

app_name = 'quotes'

urlpatterns = [
    path('quotes/', views.QuoteListCreateView.as_view(), name='quote-list'),
    path('quotes/summary/', views.QuoteSummaryView.as_view(), name='quote-summary'),
    path('quotes/<int:pk>/', views.QuoteDetailView.as_view(), name='quote-detail'),
    path('quotes/<int:pk>/status/', views.QuoteStatusView.as_view(), name='quote-status'),
    path('quotes/<int:pk>/convert/', views.QuoteConvertView.as_view(), name='quote-convert'),
    path('quotes/<int:pk>/print/', views.QuotePrintView.as_view(), name='quote-print'),
]
