# config/wsgi.py

import os
from django.core.wsgi import get_wsgi_application

# production settings by default
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.production')

# WSGI serves the JSON API only, WebSockets need config.asgi
application = get_wsgi_application()
