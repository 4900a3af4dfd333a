"""Web Server Gateway Interface entry-point."""

from pioj.factory import create_web_app

application = create_web_app()
