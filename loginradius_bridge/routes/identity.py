"""Provides the endpoints that the LoginRadius widgets call."""

from http import HTTPStatus as status

from flask import Blueprint, Response, current_app, request, session
from flask.json import jsonify
from werkzeug.exceptions import NotFound

from .. import logging
from ..controllers import account, identity
from ..services.customers import util
from ..token_store import RequestTokenStore

logger = logging.getLogger(__name__)
blueprint = Blueprint('identity', __name__, url_prefix='/loginradius')

ALWAYS_AVAILABLE = ('identity.settings', 'identity.ok')
"""Endpoints that answer even when the integration is switched off."""


@blueprint.before_request
def require_enabled() -> None:
    """Hide the integration when it is switched off."""
    if request.endpoint in ALWAYS_AVAILABLE:
        return None
    if not current_app.config.get('LOGINRADIUS_ENABLED'):
        raise NotFound('LoginRadius is not enabled')
    return None


@blueprint.after_request
def apply_response_headers(response: Response) -> Response:
    """Prevent UI redress attacks."""
    response.headers['Content-Security-Policy'] = "frame-ancestors 'none'"
    response.headers['X-Frame-Options'] = 'DENY'
    return response


@blueprint.route('/status', methods=['GET'])
def ok() -> tuple:
    """Health check endpoint."""
    data = {'status': 'OK', 'database': util.is_available()}
    return jsonify(data), status.OK


@blueprint.route('/settings', methods=['GET'])
def settings() -> tuple:
    """Settings for the widgets on the current page."""
    data, status_code, headers = \
        identity.widget_settings(request.args.get('page'))
    return jsonify(data), status_code, headers


@blueprint.route('/start', methods=['POST'])
def start() -> tuple:
    """Log in the customer after a widget login or registration."""
    data, status_code, headers = \
        identity.start_session(request.form, RequestTokenStore())
    customer_session = data.pop(identity.CUSTOMER_SESSION_KEY, None)
    if customer_session is not None:
        session['customer_id'] = customer_session.customer.customer_id
        session['login_time'] = customer_session.login_time
        session.permanent = customer_session.remember_me
    return jsonify(data), status_code, headers


@blueprint.route('/profile', methods=['POST'])
def update_profile() -> tuple:
    """Sync a LoginRadius profile change to the customer."""
    data, status_code, headers = \
        identity.update_profile(request.form, RequestTokenStore())
    return jsonify(data), status_code, headers


@blueprint.route('/sott', methods=['GET'])
def generate_sott() -> tuple:
    """Get a Secure One-Time Token for registration."""
    data, status_code, headers = identity.generate_sott()
    return jsonify(data), status_code, headers


@blueprint.route('/refresh', methods=['GET'])
def refresh_token() -> tuple:
    """Refresh an expired access token."""
    data, status_code, headers = \
        identity.refresh_token(request.args, RequestTokenStore())
    return jsonify(data), status_code, headers


@blueprint.route('/password-reset/success', methods=['GET'])
def password_reset_success() -> tuple:
    """Called by the reset-password widget once the password is changed."""
    data, status_code, headers = \
        identity.password_reset_success(request.args.get('access_token'))
    return jsonify(data), status_code, headers


@blueprint.route('/account/profile', methods=['GET'])
def editable_profile() -> tuple:
    """Prefill values for the update-profile form."""
    data, status_code, headers = \
        account.editable_profile(session.get('customer_id'))
    return jsonify(data), status_code, headers
