"""
WSGI config for shopilent project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'shopilent.settings')

application = get_wsgi_application()
