import logging

from flask import Flask
from flask_jwt_extended import JWTManager

from hubthreads.config import Config
from hubthreads.db import connect_db
from hubthreads.routes import api
from hubthreads.signals import path_invalidated

logger = logging.getLogger(__name__)


def log_invalidated_path(path):
    logger.info("Cached rendering of %s is stale", path)


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    #Database Connection
    if not app.config.get('MONGODB_URI'):
        raise ValueError("MONGODB_URI is not set in environment variables")
    connect_db(
        app.config['MONGODB_URI'],
        app.config['MONGODB_DB'],
        client_class=app.config.get('MONGODB_CLIENT_CLASS'),
    )

    JWTManager(app)
    app.register_blueprint(api)
    path_invalidated.connect(log_invalidated_path)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'])
