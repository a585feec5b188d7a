"""
WSGI compatibility layer.

Wraps the ASGI trading API for deployment on WSGI servers such as
Gunicorn or Waitress. Startup hooks do not run under WSGI, so the
schema must be created beforehand with ``python -m app.cli init-db``.
"""

from asgiref.wsgi import AsgiToWsgi

from app.main import app

application = AsgiToWsgi(app)
