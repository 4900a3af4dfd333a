"""Provides application for development purposes."""

from pioj.factory import create_web_app
from pioj.services import datastore

app = create_web_app()
with app.app_context():
    datastore.create_all(datastore.current_engine())
