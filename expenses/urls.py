"""
URL routing for expense endpoints.
"""
from django.urls import path
from . import views

app_name = 'expenses'

urlpatterns = [
    path('expenses/', views.ExpenseListCreateView.as_view(), name='expense-list'),
    path('expenses/<int:pk>/', views.ExpenseDetailView.as_view(), name='expense-detail'),
]
