import httpx
from authlib.integrations.base_client import OAuthError
from authlib.common.urls import add_params_to_uri
from flask import Blueprint, jsonify, redirect, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
from notion_auth import csrf
from notion_auth.auth import ally
from notion_auth.models import SessionUser

auth_bp = Blueprint('auth', __name__)


def _login_error(reason: str):
    return redirect(add_params_to_uri(current_app.config['LOGIN_ERROR_URL'], [('error', reason)]))


@auth_bp.route('/auth/notion/login')
def notion_login():
    """Initiate Notion OAuth login."""
    if 'notion' not in ally.providers():
        return jsonify({'error': 'Notion OAuth not configured'}), 500

    driver = ally.use('notion')
    if current_app.config.get('ALLY_STATELESS'):
        driver.stateless()
    return driver.redirect()


@auth_bp.route('/auth/notion/callback')
async def notion_callback():
    """Handle Notion OAuth callback."""
    if 'notion' not in ally.providers():
        return _login_error('not_configured')

    driver = ally.use('notion')
    if current_app.config.get('ALLY_STATELESS'):
        driver.stateless()

    if driver.access_denied():
        current_app.logger.info("Notion OAuth cancelled by user")
        return _login_error('access_denied')

    if driver.state_mismatch():
        current_app.logger.warning("Notion OAuth state mismatch")
        return _login_error('state_mismatch')

    try:
        user = await driver.user()
    except (OAuthError, httpx.HTTPError, ValueError, KeyError) as e:
        current_app.logger.error(f"Notion OAuth error: {e!r}")
        return _login_error('auth_failed')

    login_user(SessionUser.from_authenticated('notion', user), remember=True)
    return redirect(current_app.config['LOGIN_REDIRECT_URL'])


@auth_bp.route('/auth/notion/token', methods=['POST'])
@csrf.exempt  # Bearer token login, no session cookie involved
async def notion_token_login():
    """Log in with a Notion access token obtained by the client earlier."""
    if 'notion' not in ally.providers():
        return jsonify({'error': 'Notion OAuth not configured'}), 500

    data = request.get_json(silent=True) or {}
    token = data.get('access_token')
    if not token:
        return jsonify({'error': 'Missing required field: access_token'}), 400

    driver = ally.use('notion')
    try:
        user = await driver.user_from_token(token)
    except httpx.HTTPStatusError as e:
        current_app.logger.warning(f"Notion rejected access token: {e.response.status_code}")
        return jsonify({'error': 'Invalid Notion access token'}), 401
    except (httpx.HTTPError, ValueError, KeyError) as e:
        current_app.logger.error(f"Notion profile fetch failed: {e!r}")
        return jsonify({'error': 'Unable to fetch Notion profile'}), 502

    session_user = SessionUser.from_authenticated('notion', user)
    login_user(session_user)
    return jsonify(session_user.to_dict_profile())


@auth_bp.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    """Logout the current user."""
    logout_user()
    SessionUser.forget()
    return jsonify({'message': 'Logged out successfully'})


@auth_bp.route('/auth/me')
@login_required
def get_current_user():
    """Get current user's public info."""
    return jsonify(current_user.to_dict_public())


@auth_bp.route('/auth/me/profile')
@login_required
def get_user_profile():
    """Get current user's full profile."""
    return jsonify(current_user.to_dict_profile())


@auth_bp.route('/auth/providers')
def list_providers():
    """List available authentication providers."""
    providers = []

    if 'notion' in ally.providers():
        providers.append({
            'name': 'notion',
            'display_name': 'Notion',
            'login_url': '/api/auth/notion/login'
        })

    return jsonify({'providers': providers})


@auth_bp.route('/csrf-token')
def get_csrf_token():
    """Get CSRF token for frontend."""
    return jsonify({'csrf_token': generate_csrf()})
