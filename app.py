from flask import Flask, jsonify
from config import Config, get_config
from extensions import db, jwt, init_redis
from middleware.errors import register_error_handlers
from routes.auth import auth_bp
from routes.profiles import profiles_bp
from routes.connections import connections_bp
from routes.conversations import conversations_bp
from routes.jobs import jobs_bp
from routes.notifications import notifications_bp
from routes.events import events_bp
from services.notifications import notifier
from services.realtime import message_feed
from utils.logging_config import setup_logging
from utils.monitoring import request_logger_middleware, performance_monitor
import models  # noqa: F401  (register tables before create_all)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app.config.get('LOG_LEVEL', 'INFO'), app.config.get('LOG_FILE'))

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    if app.config.get('REDIS_ENABLED', True):
        init_redis(app)

    notifier.init_app(app)
    message_feed.init_app(app)

    # Register middleware
    register_error_handlers(app)
    request_logger_middleware(app)

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(profiles_bp, url_prefix='/api/profiles')
    app.register_blueprint(connections_bp, url_prefix='/api/connections')
    app.register_blueprint(conversations_bp, url_prefix='/api/conversations')
    app.register_blueprint(jobs_bp, url_prefix='/api/jobs')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(events_bp, url_prefix='/api/events')

    # Create tables
    with app.app_context():
        db.create_all()

    @app.route('/api/health')
    def health_check():
        return {'status': 'healthy', 'message': 'Pick A Side API Running'}, 200

    @app.route('/api/health/metrics')
    def health_metrics():
        return jsonify(performance_monitor.get_stats()), 200

    return app


if __name__ == '__main__':
    app = create_app(get_config())
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000)
