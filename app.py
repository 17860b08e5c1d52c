# Main Flask app
import logging
import os

from flask import Flask, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from auth import bcrypt, jwt
from config import config
from errors import WaveFormError
from models import db
from routes import main_bp, auth_bp, users_bp, contents_bp, uploads_bp

logger = logging.getLogger(__name__)


def configure_logging(app):
    logging.basicConfig(format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logging.getLogger().setLevel(app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])


def register_error_handlers(app):
    @app.errorhandler(WaveFormError)
    def handle_waveform_error(error):
        return error.to_response()

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error("Unhandled database error: %s", error)
        return jsonify({"error": "Internal server error."}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description}), error.code


def create_app(config_name='default', test_config=None):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if test_config:
        app.config.update(test_config)
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    # Register blueprints
    base_path = app.config['BASE_PATH']
    app.register_blueprint(main_bp, url_prefix=base_path)
    app.register_blueprint(auth_bp, url_prefix=base_path)
    app.register_blueprint(users_bp, url_prefix=base_path)
    app.register_blueprint(contents_bp, url_prefix=base_path)
    app.register_blueprint(uploads_bp)

    register_error_handlers(app)

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    create_app(os.environ.get('WAVEFORM_CONFIG', 'default')).run(port=8080)
