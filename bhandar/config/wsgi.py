"""
WSGI config for the Bhandar IMS backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bhandar.config.settings')

application = get_wsgi_application()
