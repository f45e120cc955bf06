import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, jsonify, g
from flask_cors import CORS

# --- Import our configuration and the song domain ---
from config import Config
from sound_app.database.db_manager import initialize_database
from sound_app.domain.songs import FileStore, SongService, SqlAlchemySongRepository, TagExtractor
from sound_app.interfaces.http.routes import songs_bp, health_bp
from sound_app.observability import configure_structured_logging, metrics_blueprint


logger = logging.getLogger(__name__)


_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def _run_log_path(log_dir: str) -> str:
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, datetime.now().strftime("log-%Y-%m-%d-%H-%M-%S"))


def configure_logging(log_dir: str) -> str:
    """Send song ingestion and request logs to a fresh file under ``log_dir``.

    Calling it again swaps the previous run file for a new one; the JSON
    stdout handler installed by ``create_app`` is left alone. Returns the
    path of the log file.
    """
    log_path = _run_log_path(log_dir)
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for handler in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
        root.removeHandler(handler)
        handler.close()

    run_file = logging.FileHandler(log_path, encoding='utf-8')
    run_file.setLevel(logging.INFO)
    run_file.setFormatter(formatter)
    root.addHandler(run_file)

    if Config.ENABLE_CONSOLE_LOGS:
        console = logging.StreamHandler()
        console.setLevel(logging.WARNING)
        console.setFormatter(formatter)
        root.addHandler(console)

    # Server loggers write through the root handlers
    for name in ("werkzeug", "flask.app"):
        server_logger = logging.getLogger(name)
        server_logger.setLevel(logging.INFO)
        server_logger.handlers = []
        server_logger.propagate = True

    return log_path


def build_song_service(app) -> SongService:
    """Wire the song service from app configuration."""
    return SongService(
        repository=SqlAlchemySongRepository(),
        tag_extractor=TagExtractor(),
        file_store=FileStore(collision_policy=app.config.get('SONG_COLLISION_POLICY')),
    )


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    configure_structured_logging(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config.get('CORS_ALLOWED_ORIGINS', [])
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    @app.errorhandler(413)
    def _payload_too_large(_error):
        return jsonify({
            "error": "payload_too_large",
            "message": f"Uploads are limited to {app.config.get('MAX_UPLOAD_MB')} MB.",
        }), 413

    # Initialize database and the storage root
    initialize_database(app)
    storage_root = app.config['SONG_STORAGE_DIR']
    os.makedirs(storage_root, exist_ok=True)
    app.logger.info("Song storage root: %s", storage_root)

    # Expose the song service for routes
    app.extensions['song_service'] = build_song_service(app)

    # --- Register Blueprints ---
    app.register_blueprint(songs_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(Config.LOG_DIR)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=5000, threaded=True)
