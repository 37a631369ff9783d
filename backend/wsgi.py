"""WSGI entrypoint for gunicorn (``wsgi:app``)."""

from auth_service import create_app

app = create_app()
