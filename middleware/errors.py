from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from extensions import db
from utils.errors import ServiceError
import logging

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Render service and infrastructure failures as JSON"""

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error(f"Database error: {str(error)}")
        return jsonify({'error': 'Database unavailable, please try again'}), 503

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception(f"Unhandled error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500
