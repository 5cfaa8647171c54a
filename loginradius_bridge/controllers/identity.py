"""
Controllers for the endpoints that the LoginRadius widgets call.

A successful widget login or registration posts the provider's raw response
here. The access token in it is resolved to a LoginRadius profile, and the
profile is reconciled with the storefront customer, who is then logged in.
"""

import json
from http import HTTPStatus as status
from typing import Any, Dict, Mapping, Optional, Tuple

from flask import url_for
from retry import retry

from .. import logging
from ..context import get_application_config
from ..domain import CustomerSession, LocalCustomer, RemoteProfile, \
    WidgetSettings
from ..exceptions import AuthenticationFailed, ConfigurationError, \
    CustomerConflict, InvalidResetToken, NoSuchCustomer, RefreshError, \
    TransportError, Unavailable, UnexpectedError, ValidationError
from ..messages import msg
from ..services import customers, profiles, provider, tokens
from ..token_store import TokenStore

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]

CUSTOMER_SESSION_KEY = 'customer_session'
"""Controller data under this key is for the route, not the browser."""


def _catalog() -> Mapping[str, str]:
    catalog: Mapping[str, str] = \
        get_application_config().get('LOGINRADIUS_MESSAGES') or {}
    return catalog


def unexpected_error(detail: Any = None) -> Dict[str, Any]:
    """
    The generic error result shown to the customer.

    Whatever went wrong is logged in full first; the customer only ever sees
    the localized "unexpected error" message.
    """
    if detail is not None:
        logger.error('ERROR in LoginRadius bridge%s',
                     logging.format_response(detail)
                     if isinstance(detail, Mapping) else f': {detail}')
    return {
        'success': False,
        'status': 'ERROR',
        'message': msg('error.unexpected', _catalog())
    }


def _parse_response(form_data: Mapping[str, Any]) -> Dict[str, Any]:
    raw = form_data.get('response')
    if not raw:
        raise ValidationError('No response', {'response': raw})
    try:
        response = json.loads(raw)
    except ValueError as e:
        raise ValidationError('Response is not JSON') from e
    if not isinstance(response, dict):
        raise ValidationError('Response is not an object')
    return response


@retry(CustomerConflict, tries=2)
@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_link(profile: RemoteProfile,
             remember_me: bool) -> CustomerSession:
    return customers.link_or_create(profile, remember_me)


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _do_update(profile: RemoteProfile) -> LocalCustomer:
    return customers.update_existing(profile)


def start_session(form_data: Mapping[str, Any],
                  store: TokenStore) -> ResponseData:
    """
    Log in the customer for a widget login, registration, or social login.

    Parameters
    ----------
    form_data : Mapping
        Should include ``response``, the serialized widget response. That
        carries ``access_token`` and, for logins, ``remember_me``.
    store : :class:`.TokenStore`
        Where a refreshed access token is written.

    Returns
    -------
    dict
        ``{'status': 'OK'}``, or an error result. On success the
        :class:`.CustomerSession` is included under
        :const:`CUSTOMER_SESSION_KEY` for the route to pick up.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    try:
        response = _parse_response(form_data)
    except ValidationError as e:
        return unexpected_error(e), status.BAD_REQUEST, {}

    access_token = response.get('access_token')
    store.set_token(access_token)
    remember_me = response.get('remember_me')
    remember_me = remember_me is True or remember_me == 'true'

    try:
        profile = profiles.get_remote_profile(access_token, store)
        customer_session = _do_link(profile, remember_me)
    except (UnexpectedError, ConfigurationError) as e:
        return unexpected_error(e), status.OK, {}
    except (ValidationError, AuthenticationFailed, InvalidResetToken,
            CustomerConflict, Unavailable) as e:
        logger.exception('Could not log in customer')
        return unexpected_error(e), status.OK, {}

    return {'status': 'OK', CUSTOMER_SESSION_KEY: customer_session}, \
        status.OK, {}


def update_profile(form_data: Mapping[str, Any],
                   store: TokenStore) -> ResponseData:
    """
    Write a change made in the update-profile widget through to the customer.

    Parameters
    ----------
    form_data : Mapping
        Should include ``response``, the serialized widget response. The
        access token is taken from it or, failing that, from the
        ``access_token`` field.
    store : :class:`.TokenStore`

    Returns
    -------
    dict
        ``{'status': 'OK'}`` or an error result.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    try:
        response = _parse_response(form_data)
    except ValidationError as e:
        return unexpected_error(e), status.BAD_REQUEST, {}

    access_token = response.get('access_token') \
        or form_data.get('access_token')
    store.set_token(access_token)
    try:
        profile = profiles.get_remote_profile(access_token, store)
        _do_update(profile)
    except (UnexpectedError, ConfigurationError, NoSuchCustomer) as e:
        return unexpected_error(e), status.OK, {}
    except (ValidationError, Unavailable) as e:
        logger.exception('Could not update customer')
        return unexpected_error(e), status.OK, {}
    return {'status': 'OK'}, status.OK, {}


def generate_sott() -> ResponseData:
    """Get a Secure One-Time Token for the registration widget."""
    try:
        result = provider.generate_sott()
    except (ConfigurationError, TransportError) as e:
        return unexpected_error(e), status.OK, {}
    if not result.ok:
        logger.error('SOTT generation failed with error code %s: %s',
                     result.error_code, result.description)
    return result.payload, status.OK, {}


def refresh_token(params: Mapping[str, Any],
                  store: TokenStore) -> ResponseData:
    """
    Refresh an expired access token for the browser.

    Parameters
    ----------
    params : Mapping
        Should include ``access_token``; may include ``refresh_token``.
    store : :class:`.TokenStore`

    Returns
    -------
    dict
        ``access_token`` (and ``refresh_token`` if one was issued), or an
        error result.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    access_token = params.get('access_token')
    if not access_token:
        return unexpected_error({
            'errMsg': 'No access token included in refresh token request.',
            'queryString': dict(params)
        }), status.OK, {}
    try:
        pair = tokens.refresh_access_token(
            access_token, params.get('refresh_token') or None, store
        )
    except (RefreshError, ConfigurationError) as e:
        return unexpected_error(e), status.OK, {}

    data: Dict[str, Any] = {'success': True, 'access_token': pair.access_token}
    if pair.refresh_token:
        data['refresh_token'] = pair.refresh_token
    return data, status.OK, {}


def password_reset_success(access_token: Optional[str]) -> ResponseData:
    """
    Mark the customer's email unverified after a password reset.

    The password has changed whether or not this works, so the customer is
    always told so.
    """
    if access_token:
        try:
            profiles.unverify_account(access_token)
        except (ConfigurationError, TransportError) as e:
            logger.error('Could not unverify account: %s', e)
    else:
        logger.error('No access token included in password reset success')
    return {
        'status': 'OK',
        'message': msg('notice.passwordreset', _catalog())
    }, status.OK, {}


def widget_settings(page: Optional[str] = None) -> ResponseData:
    """
    Settings that the browser needs to set up the widgets.

    After logging in from the checkout page (``page=checkout``) the customer
    is sent back to checkout; from anywhere else, to the account page.
    """
    config = get_application_config()
    if page == 'checkout':
        forwarding_url = config.get('CHECKOUT_FORWARDING_URL') or ''
    else:
        forwarding_url = config.get('LOGIN_FORWARDING_URL') or ''
    settings = WidgetSettings(
        enabled=bool(config.get('LOGINRADIUS_ENABLED')),
        key=config.get('LOGINRADIUS_API_KEY') or '',
        site_name=config.get('LOGINRADIUS_SITE_NAME') or '',
        reset_password_url=config.get('LOGINRADIUS_RESET_PASSWORD_URL'),
        recaptcha_site_key=config.get('LOGINRADIUS_RECAPTCHA_SITE_KEY') or '',
        script_url=config.get('LOGINRADIUS_SCRIPT_URL') or '',
        start_url=url_for('identity.start'),
        update_profile_url=url_for('identity.update_profile'),
        sott_url=url_for('identity.generate_sott'),
        refresh_url=url_for('identity.refresh_token'),
        password_reset_success_url=url_for('identity.password_reset_success'),
        forwarding_url=forwarding_url,
        account_home_url=config.get('ACCOUNT_HOME_URL') or '',
        email_used_message=config.get('LOGINRADIUS_EMAIL_USED_MESSAGE'),
        messages={key: msg(key, _catalog())
                  for key in ('error.scriptload', 'error.required',
                              'error.profileupdate', 'notice.forgotpassword')}
    )
    return settings.to_dict(), status.OK, {}
