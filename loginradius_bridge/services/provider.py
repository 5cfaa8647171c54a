"""
Integration with the LoginRadius REST API.

All calls go through :meth:`ProviderSession.call`, which injects the
credentials, composes the query string, and parses the response. Provider-level
failures are not raised: they come back as a :class:`.ServiceCallResult` whose
payload carries an ``ErrorCode``. Only missing credentials
(:class:`.ConfigurationError`) and failures below the API level
(:class:`.TransportError`) raise.

See https://www.loginradius.com/docs/api/v2/getting-started/introduction
"""

import json
from functools import wraps
from typing import Any, Dict, List, NamedTuple, Optional, Tuple
from urllib.parse import urlencode, urljoin

import requests
from flask import Flask

from .. import logging
from ..context import get_application_config, get_application_global
from ..domain import ServiceCallResult
from ..exceptions import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

SOTT_PATH = 'identity/v2/manage/account/sott'
ACCOUNT_BY_TOKEN_PATH = 'identity/v2/auth/account'
ACCOUNT_PATH = 'identity/v2/manage/account'
MINT_REFRESH_TOKEN_PATH = 'api/v2/access_token/refresh'
EXCHANGE_REFRESH_TOKEN_PATH = 'identity/v2/manage/account/access_token/refresh'


class RequestSpec(NamedTuple):
    """Describes one call to the LoginRadius API."""

    path: str
    method: str = 'GET'
    requires_secret: bool = False
    access_token: Optional[str] = None
    """Passed as the ``access_token`` query parameter."""

    access_token_header: Optional[str] = None
    """Passed as an ``Authorization: Bearer`` header."""

    refresh_token: Optional[str] = None
    uid: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    null_support: Optional[bool] = None
    verification_token: Optional[str] = None
    content_type: str = 'application/json'


def _param(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class ProviderSession(object):
    """
    An HTTP session with the LoginRadius API.

    One of these lives for the duration of a request context (see
    :func:`current_session`).
    """

    def __init__(self, api_key: Optional[str], api_secret: Optional[str],
                 base_url: str, timeout: float = 10.,
                 max_retries: int = 2) -> None:
        """Create a new HTTP session."""
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.timeout = timeout
        self._session = requests.Session()
        self._adapter = requests.adapters.HTTPAdapter(max_retries=max_retries)
        self._session.mount('https://', self._adapter)
        self._session.mount('http://', self._adapter)

    def _check_credentials(self) -> None:
        if not self.api_key or not self.api_secret:
            missing = 'API key' if not self.api_key else 'credentials'
            logger.error('loginradius.http missing %s', missing)
            raise ConfigurationError(f'LoginRadius {missing} not configured')

    def _query(self, spec: RequestSpec) -> List[Tuple[str, str]]:
        params = [('apikey', str(self.api_key))]
        if spec.requires_secret:
            # The legacy ``api/`` endpoints name the secret differently.
            name = 'secret' if spec.path.startswith('api/') else 'apisecret'
            params.append((name, str(self.api_secret)))
        if spec.access_token:
            params.append(('access_token', spec.access_token))
        if spec.refresh_token:
            params.append(('refresh_token', spec.refresh_token))
        if spec.null_support is not None:
            params.append(('nullsupport', _param(spec.null_support)))
        if spec.verification_token:
            params.append(('verificationtoken', spec.verification_token))
        return params

    def build_url(self, spec: RequestSpec) -> str:
        """Compose the full URL for a call: path, UID, then query."""
        path = spec.path
        if spec.uid:
            path = f'{path}/{spec.uid}'
        return f'{urljoin(self.base_url, path)}?{urlencode(self._query(spec))}'

    def build_headers(self, spec: RequestSpec) -> Dict[str, str]:
        """Headers for a call; the bearer header only when asked for."""
        headers = {'charset': 'utf-8', 'Content-Type': spec.content_type}
        if spec.access_token_header:
            headers['Authorization'] = f'Bearer {spec.access_token_header}'
        return headers

    def call(self, spec: RequestSpec) -> ServiceCallResult:
        """
        Make a call to the LoginRadius API.

        Parameters
        ----------
        spec : :class:`RequestSpec`

        Returns
        -------
        :class:`.ServiceCallResult`
            The parsed body, whether or not the provider reported an error.

        Raises
        ------
        :class:`.ConfigurationError`
            If the API key or secret is missing. No call is made.
        :class:`.TransportError`
            If the call could not be completed or the body is not JSON.

        """
        self._check_credentials()
        if logging.debug_enabled():
            logger.info('loginradius.http called with params: %s',
                        logging.mask(spec._asdict()))

        url = self.build_url(spec)
        data = json.dumps(spec.body) if spec.body is not None else None
        try:
            response = self._session.request(spec.method, url,
                                             headers=self.build_headers(spec),
                                             data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error('loginradius.http %s %s failed: %s', spec.method,
                         spec.path, e)
            raise TransportError(f'Could not reach LoginRadius: {e}') from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error('loginradius.http %s %s returned %i with a body that'
                         ' is not JSON', spec.method, spec.path,
                         response.status_code)
            raise TransportError('Could not read the LoginRadius'
                                 ' response') from e
        if not isinstance(payload, dict):
            raise TransportError('Unexpected LoginRadius response')
        if logging.debug_enabled():
            logger.info('loginradius.http response: %s',
                        logging.format_response(payload))
        if not response.ok:
            logger.debug('LoginRadius responded with status %i',
                         response.status_code)
        return ServiceCallResult(payload, response.status_code)

    def generate_sott(self) -> ServiceCallResult:
        """Get a Secure One-Time Token, required for registration."""
        return self.call(RequestSpec(SOTT_PATH, requires_secret=True))

    def get_profile_by_token(self, access_token: str) -> ServiceCallResult:
        """Get the account that an access token belongs to."""
        return self.call(RequestSpec(ACCOUNT_BY_TOKEN_PATH,
                                     access_token_header=access_token))

    def get_profile_by_uid(self, uid: str) -> ServiceCallResult:
        """Get an account by its UID."""
        return self.call(RequestSpec(ACCOUNT_PATH, requires_secret=True,
                                     uid=uid))

    def mint_refresh_token(self, access_token: str) -> ServiceCallResult:
        """Get a refresh token for an (expired) access token."""
        return self.call(RequestSpec(MINT_REFRESH_TOKEN_PATH,
                                     requires_secret=True,
                                     access_token=access_token))

    def exchange_refresh_token(self, refresh_token: str) -> ServiceCallResult:
        """Get a new access token for a refresh token."""
        return self.call(RequestSpec(EXCHANGE_REFRESH_TOKEN_PATH,
                                     requires_secret=True,
                                     refresh_token=refresh_token))

    def unverify_account(self, uid: str,
                         access_token: str) -> ServiceCallResult:
        """
        Set ``EmailVerified`` to false on an account.

        A verified email address can no longer be changed by the customer, and
        LoginRadius marks the address verified after a password reset.
        """
        return self.call(RequestSpec(ACCOUNT_PATH, method='PUT',
                                     requires_secret=True,
                                     access_token=access_token, uid=uid,
                                     null_support=False,
                                     body={'EmailVerified': False}))


def init_app(app: Optional[Flask] = None) -> None:
    """
    Set required configuration defaults for the application.

    Parameters
    ----------
    app : :class:`flask.Flask`

    """
    if app is not None:
        app.config.setdefault('LOGINRADIUS_API_URL',
                              'https://api.loginradius.com/')
        app.config.setdefault('LOGINRADIUS_TIMEOUT', 10.)
        app.config.setdefault('LOGINRADIUS_MAX_RETRIES', 2)


def get_session(app: Optional[Flask] = None) -> ProviderSession:
    """
    Create a new LoginRadius session.

    Parameters
    ----------
    app : :class:`flask.Flask`

    Return
    ------
    :class:`.ProviderSession`

    """
    config = get_application_config(app)
    return ProviderSession(
        config.get('LOGINRADIUS_API_KEY'),
        config.get('LOGINRADIUS_API_SECRET'),
        config.get('LOGINRADIUS_API_URL', 'https://api.loginradius.com/'),
        timeout=float(config.get('LOGINRADIUS_TIMEOUT', 10.)),
        max_retries=int(config.get('LOGINRADIUS_MAX_RETRIES', 2))
    )


def current_session(app: Optional[Flask] = None) -> ProviderSession:
    """
    Get the LoginRadius session for this context (if there is one).

    Parameters
    ----------
    app : :class:`flask.Flask`

    Return
    ------
    :class:`.ProviderSession`

    """
    g = get_application_global()
    if g:
        if 'loginradius' not in g:
            g.loginradius = get_session(app)  # type: ignore
        return g.loginradius  # type: ignore
    return get_session(app)


@wraps(ProviderSession.generate_sott)
def generate_sott() -> ServiceCallResult:
    """Wrapper for :meth:`ProviderSession.generate_sott`."""
    return current_session().generate_sott()


@wraps(ProviderSession.get_profile_by_uid)
def get_profile_by_uid(uid: str) -> ServiceCallResult:
    """Wrapper for :meth:`ProviderSession.get_profile_by_uid`."""
    return current_session().get_profile_by_uid(uid)
