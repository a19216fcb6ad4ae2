"""
Celery application for background work.

Tasks:
    - inventory.tasks.notify_low_stock: alert after stock-decrementing writes
    - reports.tasks.generate_daily_sales_report: scheduled via Celery Beat
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('retail_backoffice')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
