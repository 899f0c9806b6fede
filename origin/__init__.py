from flask import Flask, jsonify
from flask_cors import CORS
from origin.config import config
from origin.errors import OriginError
from origin.services.vocabulary_service import vocabulary_store
import logging
from logging.handlers import RotatingFileHandler
import os

def create_app():
    app = Flask(__name__)

    # Configure Logging
    os.makedirs(config.LOG_DIR, exist_ok=True)
    file_handler = RotatingFileHandler(os.path.join(config.LOG_DIR, 'app.log'), maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)
    app.logger.setLevel(logging.INFO)
    app.logger.info('Origin startup')

    # Apply Config
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
    app.json.ensure_ascii = config.JSON_AS_ASCII

    # Mobile and web clients call the API cross-origin
    CORS(app)

    vocabulary_store.init_schema()

    # Register Blueprints
    from origin.routes.main import main_bp
    from origin.routes.api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)

    # Error Handlers
    @app.errorhandler(OriginError)
    def origin_error(e):
        if e.status >= 500:
            app.logger.error(f'{e.kind}: {e.message} {e.details or ""}')
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(413)
    def request_entity_too_large(e):
        app.logger.warning('Request entity too large')
        return jsonify({"error": "payload_too_large", "message": "Image is too large"}), 413

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f'Server Error: {e}')
        return jsonify({"error": "internal_error", "message": "Internal server error"}), 500

    return app
