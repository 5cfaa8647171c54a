"""Client for the bridge's own endpoints, as called from the page."""

import json
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests

from .. import logging
from ..domain import WidgetSettings
from ..exceptions import TransportError

logger = logging.getLogger(__name__)


class ServerBoundary(object):
    """Calls the bridge endpoints listed in :class:`.WidgetSettings`."""

    def __init__(self, base_url: str, settings: WidgetSettings,
                 timeout: float = 10.,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url
        self.settings = settings
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, path: str,
                 **kwargs: Any) -> Dict[str, Any]:
        url = urljoin(self.base_url, path)
        try:
            resp = self._session.request(method, url, timeout=self.timeout,
                                         **kwargs)
            data = resp.json()
        except requests.exceptions.RequestException as e:
            raise TransportError(f'Could not reach {path}: {e}') from e
        except ValueError as e:
            raise TransportError(f'{path} did not return JSON') from e
        if not isinstance(data, dict):
            raise TransportError(f'{path} returned unexpected data')
        return data

    def start_session(self, response: Dict[str, Any]) -> Dict[str, Any]:
        """Post a login, registration or social-login widget response."""
        return self._request('POST', self.settings.start_url,
                             data={'response': json.dumps(response)})

    def update_profile(self, response: Dict[str, Any],
                       access_token: Optional[str] = None) -> Dict[str, Any]:
        """Post an update-profile widget response."""
        data = {'response': json.dumps(response)}
        if access_token:
            data['access_token'] = access_token
        return self._request('POST', self.settings.update_profile_url,
                             data=data)

    def generate_sott(self) -> Dict[str, Any]:
        return self._request('GET', self.settings.sott_url)

    def refresh_token(self, access_token: Optional[str],
                      refresh_token: Optional[str] = None) -> Dict[str, Any]:
        params = {'access_token': access_token or ''}
        if refresh_token:
            params['refresh_token'] = refresh_token
        return self._request('GET', self.settings.refresh_url, params=params)

    def password_reset_success(self,
                               access_token: Optional[str]) -> Dict[str, Any]:
        return self._request('GET', self.settings.password_reset_success_url,
                             params={'access_token': access_token or ''})
