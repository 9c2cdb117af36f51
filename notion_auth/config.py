import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Flask core
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        if os.environ.get('FLASK_ENV') == 'production':
            raise RuntimeError("SECRET_KEY must be set in production")
        SECRET_KEY = 'dev-secret-key-change-in-production'

    # Notion OAuth
    NOTION_CLIENT_ID = os.environ.get('NOTION_CLIENT_ID')
    NOTION_CLIENT_SECRET = os.environ.get('NOTION_CLIENT_SECRET')
    NOTION_CALLBACK_URL = os.environ.get('NOTION_CALLBACK_URL')  # resolved from the route when unset

    # Endpoint overrides, the driver defaults point at api.notion.com
    NOTION_AUTHORIZE_URL = os.environ.get('NOTION_AUTHORIZE_URL')
    NOTION_ACCESS_TOKEN_URL = os.environ.get('NOTION_ACCESS_TOKEN_URL')
    NOTION_USER_INFO_URL = os.environ.get('NOTION_USER_INFO_URL')

    # Skip the state cookie (no CSRF protection on the callback)
    ALLY_STATELESS = os.environ.get('ALLY_STATELESS', 'False').lower() == 'true'

    # Where the callback sends the browser afterwards
    LOGIN_REDIRECT_URL = os.environ.get('LOGIN_REDIRECT_URL', '/')
    LOGIN_ERROR_URL = os.environ.get('LOGIN_ERROR_URL', '/login.html')

    # Session configuration
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'False').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 86400 * 7  # 7 days

    # CSRF configuration
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # 1 hour expiry

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    # Request size limit (1MB max)
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024


class DevelopmentConfig(Config):
    DEBUG = True
    SESSION_COOKIE_SECURE = False


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    NOTION_CLIENT_ID = 'notion-client-id'
    NOTION_CLIENT_SECRET = 'notion-client-secret'
    NOTION_CALLBACK_URL = 'http://localhost/api/auth/notion/callback'
    NOTION_AUTHORIZE_URL = None
    NOTION_ACCESS_TOKEN_URL = None
    NOTION_USER_INFO_URL = None
    ALLY_STATELESS = False
