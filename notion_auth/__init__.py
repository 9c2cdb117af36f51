from flask import Flask, jsonify
from flask_cors import CORS
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_talisman import Talisman
import os

login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address, default_limits=["1000 per hour"])

# CORS allowed origins - restrict to known domains
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:5000,http://127.0.0.1:5000').split(',')

# Content Security Policy - Notion avatars are served from arbitrary https hosts
CSP = {
    'default-src': "'self'",
    'img-src': ["'self'", "data:", "https:"],
    'connect-src': ["'self'"],
}


def create_app(config_class=None):
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        from notion_auth.config import DevelopmentConfig, ProductionConfig
        if os.environ.get('FLASK_ENV') == 'production':
            config_class = ProductionConfig
        else:
            config_class = DevelopmentConfig
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app, origins=CORS_ORIGINS, supports_credentials=True)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Security headers via Talisman
    # Disable HTTPS forcing in development, enable in production
    force_https = os.environ.get('FLASK_ENV') == 'production'
    Talisman(
        app,
        force_https=force_https,
        session_cookie_secure=app.config['SESSION_COOKIE_SECURE'],
        content_security_policy=CSP,
    )

    # Initialize social login drivers
    from notion_auth.auth import init_ally
    init_ally(app)

    # Configure login manager
    login_manager.login_view = None  # We handle redirects ourselves
    login_manager.session_protection = 'basic'

    @login_manager.user_loader
    def load_user(user_id):
        from notion_auth.models import SessionUser
        return SessionUser.from_session(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Unauthorized - please log in'}), 401

    # Register blueprints
    from notion_auth.routes.auth import auth_bp

    app.register_blueprint(auth_bp, url_prefix='/api')

    # Auth endpoints: 10/minute (prevent brute force)
    limiter.limit("10 per minute")(auth_bp)

    @app.route('/health')
    def health():
        from notion_auth.auth import ally
        return jsonify({'status': 'ok', 'providers': ally.providers()})

    return app
