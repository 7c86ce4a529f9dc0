# app.py - Main Flask Application
import logging
import os

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from api.appointments import STORE_EXTENSION, appointments_bp
from scheduling.store import APPOINTMENTS_FILE, AppointmentStore

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(level='INFO'):
    """Route engine and app logs through one stream handler"""
    logging.basicConfig(format=LOG_FORMAT)
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.getLogger().setLevel(resolved)


def load_config(overrides=None):
    """Settings from the environment (and .env), with explicit overrides on top"""
    load_dotenv()
    config = {
        'APPOINTMENTS_STORE_PATH': os.environ.get('APPOINTMENTS_STORE_PATH', APPOINTMENTS_FILE),
        'CALENDAR_LOG_LEVEL': os.environ.get('CALENDAR_LOG_LEVEL', 'INFO'),
        'CORS_ORIGINS': os.environ.get('CORS_ORIGINS', '*'),
    }
    config.update(overrides or {})
    return config


def create_app(store=None, config=None):
    app = Flask(__name__)
    app.config.update(load_config(config))
    configure_logging(app.config['CALENDAR_LOG_LEVEL'])

    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    if store is None:
        # An empty path keeps the collection in memory
        store = AppointmentStore(app.config['APPOINTMENTS_STORE_PATH'] or None)
    app.extensions[STORE_EXTENSION] = store

    # Register blueprints
    app.register_blueprint(appointments_bp, url_prefix='/api')

    return app


def main():
    app = create_app()
    app.run(
        host=os.environ.get('CALENDAR_HOST', '127.0.0.1'),
        port=int(os.environ.get('CALENDAR_PORT', '5000')),
        debug=os.environ.get('CALENDAR_DEBUG', '').lower() in ('1', 'true', 'yes'),
    )


if __name__ == '__main__':
    main()
