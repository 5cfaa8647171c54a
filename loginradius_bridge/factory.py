"""Application factory for the LoginRadius bridge."""

from datetime import timedelta
from typing import Any, Dict, Optional

from flask import Flask

from . import logging
from .routes import identity
from .services import provider
from .services.customers import util


def create_web_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """Initialize and configure the LoginRadius bridge application."""
    app = Flask('loginradius_bridge')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)
    app.permanent_session_lifetime = \
        timedelta(seconds=int(app.config['PERMANENT_SESSION_LIFETIME']))

    logging.setup_logger(app.config)
    provider.init_app(app)
    util.init_app(app)

    app.register_blueprint(identity.blueprint)

    if app.config.get('CREATE_DB'):
        with app.app_context():
            util.create_all()
    return app
