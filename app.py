"""
Flask Web Application for the Hostel Complaint Desk
Provides the JSON API for students, authorities and admins
"""
import logging
import os

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from db_config import init_database
from routes import register_blueprints
from services import build_services
from services.errors import ComplaintDeskError

logger = logging.getLogger('app')


def create_app(overrides=None, mailer=None):
    """
    Build the application.

    Args:
        overrides: dict of config values applied on top of config.py (tests)
        mailer: object with send_email(to_email, subject, body) -> dict;
                defaults to the SendGrid EmailService
    """
    app = Flask(__name__)
    app.config.update(config.as_dict())
    app.config.update(overrides or {})
    app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_UPLOAD_MB'] * 1024 * 1024

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s'
    )

    # Configure CORS for the React frontend
    CORS(app,
         resources={r"/api/*": {"origins": [app.config['FRONTEND_URL']]}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])

    init_database(app.config['DATABASE_PATH'])
    os.makedirs(app.config['UPLOAD_DIR'], exist_ok=True)

    services = build_services(app.config, mailer=mailer)
    app.extensions['complaint_desk'] = services
    services.outbox.start()

    register_blueprints(app)

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'success': True, 'status': 'ok'})

    @app.route('/uploads/<path:filename>', methods=['GET'])
    def uploaded_file(filename):
        return send_from_directory(os.path.abspath(app.config['UPLOAD_DIR']), filename)

    @app.errorhandler(ComplaintDeskError)
    def handle_service_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"UNHANDLED | {type(error).__name__}: {error}")
        return jsonify({'success': False, 'message': 'Internal server error'}), 500

    logger.info(f"APP_READY | db={app.config['DATABASE_PATH']} | outbox_sync={app.config['OUTBOX_SYNC']}")
    return app


if __name__ == '__main__':
    app = create_app()

    print("=" * 60)
    print("  Hostel Complaint Desk - Complaint Management API")
    print("=" * 60)
    print("\n🌐 Starting server at: http://localhost:5000")
    print("📝 Press Ctrl+C to stop the server\n")
    print("=" * 60)

    app.run(debug=False, use_reloader=False, host='0.0.0.0', port=5000)
