"""
Settings used by the test suite.

Runs against in-memory SQLite unless POSTGRES_DB is set, in which case the
PostgreSQL configuration from settings.py is kept (needed by the
concurrency tests).
"""
import os

from .settings import *  # noqa: F401,F403

if not os.environ.get('POSTGRES_DB'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

RATE_LIMIT_ENABLED = False

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PURCHASE_ORDER_RECEIPT_RESTOCKS = False
LOW_STOCK_ALERTS_ENABLED = True

LOGGING['root']['level'] = 'WARNING'  # noqa: F405
