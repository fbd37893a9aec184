"""
WSGI config for campusdeals project.

Serves the REST API only; the realtime channel needs the ASGI application.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'campusdeals.settings')

application = get_wsgi_application()
