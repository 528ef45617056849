import logging

from mongoengine import connect, disconnect

logger = logging.getLogger(__name__)

_connection = None


def connect_db(uri, db_name, client_class=None):
    """Open the default mongoengine connection.

    Calling it again while connected returns the open client.
    """
    global _connection
    if _connection is not None:
        return _connection

    options = {}
    if client_class is not None:
        options['mongo_client_class'] = client_class

    _connection = connect(db=db_name, host=uri, **options)
    logger.info("Connected to MongoDB database %s", db_name)
    return _connection


def disconnect_db():
    global _connection
    if _connection is None:
        return
    disconnect()
    _connection = None
    logger.info("Disconnected from MongoDB")
