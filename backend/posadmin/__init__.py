# backend/posadmin/__init__.py
from __future__ import annotations

from flask import Flask

from .config import Config


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
