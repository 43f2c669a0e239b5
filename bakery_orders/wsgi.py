"""
WSGI config for bakery_orders project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bakery_orders.settings')

application = get_wsgi_application()
