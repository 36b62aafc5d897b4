"""
Flask Application Factory
Creates and configures the Customs Sentinel API with CORS and blueprints
Serves both API endpoints and static frontend files in production
"""
import logging
from flask import Flask, jsonify, send_from_directory, request
from flask_cors import CORS
from dotenv import load_dotenv
import os


def create_app(config=None, orchestrator=None):
    """
    Build the Flask app.

    Args:
        config: Config to use; read from the environment (and .env) when omitted
        orchestrator: Pre-built SentinelOrchestrator, mainly for tests
    """
    from customs_sentinel.config import Config
    from customs_sentinel.orchestrator import SentinelOrchestrator

    if config is None:
        load_dotenv()
        config = Config.from_env()

    # Configure logging
    log_level = logging.DEBUG if config.FLASK_DEBUG else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger('customs_sentinel')

    # Suppress noisy werkzeug access logs
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    # Check for static files (production build)
    static_folder = os.path.join(os.path.dirname(__file__), '..', 'static')
    has_static = os.path.exists(static_folder) and os.path.exists(os.path.join(static_folder, 'index.html'))

    if has_static:
        app = Flask(__name__, static_folder=static_folder, static_url_path='')
        logger.info("Running in production mode with static files")
    else:
        app = Flask(__name__)
        logger.info("Running in development mode (no static files)")

    # Credentials are only checked when the first model call is made
    logger.info(f"Azure OpenAI configured: {config.is_openai_configured()}")
    logger.info(f"Azure OpenAI auth mode: {config.AZURE_OPENAI_AUTH_MODE}")
    logger.info(f"Azure OpenAI deployment: {config.AZURE_OPENAI_DEPLOYMENT}")
    logger.info(f"Request timeout: {config.REQUEST_TIMEOUT_SECONDS}s")

    # CORS only needed in development (when frontend runs separately)
    if config.FLASK_ENV == 'development' or not has_static:
        CORS(app, resources={
            r"/api/*": {
                "origins": "*",
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"]
            }
        })
        logger.info("CORS enabled for development")

    app.config['SENTINEL_CONFIG'] = config
    app.extensions['sentinel'] = orchestrator or SentinelOrchestrator.from_config(config)

    # Request logging - only log errors and non-status endpoints at debug level
    @app.before_request
    def log_request():
        if request.path.startswith('/api') and request.path != '/api/status':
            logger.debug(f"→ {request.method} {request.path}")

    @app.after_request
    def log_response(response):
        if request.path.startswith('/api') and request.path != '/api/status':
            if response.status_code >= 400:
                logger.warning(f"← {request.method} {request.path} [{response.status_code}]")
            else:
                logger.debug(f"← {request.method} {request.path} [{response.status_code}]")
        return response

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            'status': 'healthy',
            'service': 'Customs Sentinel API',
            'version': '1.0.0'
        })

    @app.route('/api/status', methods=['GET'])
    def api_status():
        """Return configuration status for frontend"""
        return jsonify({
            'openaiConfigured': config.is_openai_configured(),
            'authMode': config.AZURE_OPENAI_AUTH_MODE,
            'deployments': {
                'analysis': config.AZURE_OPENAI_DEPLOYMENT,
                'simulation': config.AZURE_OPENAI_SIMULATION_DEPLOYMENT,
                'chat': config.AZURE_OPENAI_CHAT_DEPLOYMENT,
            }
        })

    from customs_sentinel.routes import declarations, analysis, simulator, chat, dashboard

    app.register_blueprint(declarations.bp)
    app.register_blueprint(analysis.bp)
    app.register_blueprint(simulator.bp)
    app.register_blueprint(chat.bp)
    app.register_blueprint(dashboard.bp)

    # Serve React app for non-API routes (production only)
    if has_static:
        @app.route('/')
        def serve_root():
            return send_from_directory(app.static_folder, 'index.html')

        @app.route('/<path:path>')
        def serve_static(path):
            # Serve static file if it exists, otherwise return index.html for SPA routing
            file_path = os.path.join(app.static_folder, path)
            if os.path.isfile(file_path):
                return send_from_directory(app.static_folder, path)
            return send_from_directory(app.static_folder, 'index.html')

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error'}), 500

    return app
