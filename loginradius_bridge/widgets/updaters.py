"""
Profile and password changes made through the LoginRadius API.

These forms call LoginRadius directly with the customer's access token. If
the token has expired, it is refreshed through the bridge once and the call
retried once. A successful profile change is then synced to the storefront
customer.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from .. import logging
from ..domain import ErrorCodes, WidgetSettings
from ..exceptions import ProviderError, TransportError, ValidationError
from ..messages import msg
from ..token_store import TokenStore
from .boundary import ServerBoundary
from .forms import ChangePasswordForm, FormType, ProfileForm, \
    validate_required
from .page import Page, WidgetAPI

logger = logging.getLogger(__name__)

PROFILE_SCHEMA = [
    {'type': 'string', 'name': 'firstname', 'rules': 'required',
     'permission': 'w'},
    {'type': 'string', 'name': 'lastname', 'rules': 'required',
     'permission': 'w'},
    {'type': 'string', 'name': 'email', 'rules': 'required',
     'permission': 'w'},
]


class _TokenRefreshingUpdater(object):
    form_type: FormType

    def __init__(self, api: WidgetAPI, boundary: ServerBoundary,
                 store: TokenStore, page: Page,
                 settings: WidgetSettings) -> None:
        self.api = api
        self.boundary = boundary
        self.store = store
        self.page = page
        self.settings = settings

    def _message(self, key: str) -> str:
        return msg(key, self.settings.messages)

    def _refresh(self, token: Optional[str]) -> Optional[str]:
        try:
            result = self.boundary.refresh_token(token)
        except TransportError as e:
            logger.error('Token refresh failed: %s', e)
            self.page.show_error(self.form_type,
                                 self._message('error.unexpected'))
            return None
        new_token = result.get('access_token')
        if not new_token:
            self.page.show_error(self.form_type, result.get('message') or
                                 self._message('error.unexpected'))
            return None
        self.store.set_token(new_token)
        return str(new_token)

    def _call(self, call: Callable[[str], Dict[str, Any]]
              ) -> Optional[Dict[str, Any]]:
        """Make an API call, refreshing the token and retrying at most once."""
        token = self.store.get_token() or ''
        refreshed = False
        while True:
            try:
                return call(token)
            except ProviderError as e:
                if e.code == ErrorCodes.TOKEN_EXPIRED and not refreshed:
                    refreshed = True
                    new_token = self._refresh(token)
                    if new_token is None:
                        return None
                    token = new_token
                    continue
                self.page.show_error(self.form_type, e.description)
                return None

    def _validate(self, form_class: type, data: Mapping[str, Any]) -> bool:
        try:
            validate_required(form_class, data,
                              self._message('error.required'))
        except ValidationError as e:
            self.page.show_field_errors(self.form_type, e.fields)
            return False
        return True


class ProfileUpdater(_TokenRefreshingUpdater):
    """Submits the update-profile form."""

    form_type = FormType.UPDATE_PROFILE

    def update(self, form_data: Mapping[str, Any]) -> bool:
        """
        Change the customer's LoginRadius profile, then sync the storefront.

        Parameters
        ----------
        form_data : Mapping
            ``firstName``, ``lastName`` and ``email``; all required.

        Returns
        -------
        bool
            True if both profiles were updated.

        """
        if not self._validate(ProfileForm, form_data):
            return False
        data = {'email': form_data.get('email'),
                'firstname': form_data.get('firstName'),
                'lastname': form_data.get('lastName')}
        response = self._call(
            lambda token: self.api.update_data(PROFILE_SCHEMA, data, token)
        )
        if response is None:
            return False

        try:
            result = self.boundary.update_profile(response,
                                                  self.store.get_token())
        except TransportError as e:
            logger.error('Profile sync failed: %s', e)
            self.page.show_error(self.form_type,
                                 self._message('error.profileupdate'))
            return False
        if result.get('status') == 'ERROR':
            self.page.show_error(self.form_type, result.get('message') or
                                 self._message('error.profileupdate'))
            return False
        self.page.redirect(self.settings.account_home_url)
        return True


class PasswordChanger(_TokenRefreshingUpdater):
    """Submits the change-password form."""

    form_type = FormType.CHANGE_PASSWORD

    def change(self, form_data: Mapping[str, Any]) -> bool:
        """
        Change the customer's LoginRadius password.

        Parameters
        ----------
        form_data : Mapping
            ``currentPassword``, ``newPassword`` and ``confirmNewPassword``;
            all required.

        """
        if not self._validate(ChangePasswordForm, form_data):
            return False
        data = {'oldpassword': form_data.get('currentPassword'),
                'newpassword': form_data.get('newPassword'),
                'confirmpassword': form_data.get('confirmNewPassword')}
        response = self._call(
            lambda token: self.api.change_password(data, token)
        )
        if response is None:
            return False
        self.page.redirect(self.settings.account_home_url)
        return True
