"""Tests for :mod:`loginradius_bridge.widgets.updaters`."""

from unittest import TestCase, mock

from loginradius_bridge.domain import WidgetSettings
from loginradius_bridge.exceptions import ProviderError, TransportError
from loginradius_bridge.messages import DEFAULTS
from loginradius_bridge.token_store import InMemoryTokenStore
from loginradius_bridge.widgets.boundary import ServerBoundary
from loginradius_bridge.widgets.forms import FormType
from loginradius_bridge.widgets.page import Page, WidgetAPI
from loginradius_bridge.widgets.updaters import PROFILE_SCHEMA, \
    PasswordChanger, ProfileUpdater

from typing import Any

SETTINGS = WidgetSettings(enabled=True, key='key', site_name='shop',
                          account_home_url='/account')
PROFILE_FORM = {'firstName': 'Ada', 'lastName': 'Lovelace',
                'email': 'ada@example.com'}
PASSWORD_FORM = {'currentPassword': 'old', 'newPassword': 'new',
                 'confirmNewPassword': 'new'}
EXPIRED = ProviderError(906, 'Access token is expired')


def _updater(cls: type = ProfileUpdater) -> Any:
    store = InMemoryTokenStore({'LRTokenKey': 'old'})
    return cls(mock.MagicMock(spec=WidgetAPI),
               mock.MagicMock(spec=ServerBoundary), store,
               mock.MagicMock(spec=Page), SETTINGS)


class TestProfileUpdater(TestCase):
    """:meth:`ProfileUpdater.update` changes both profiles."""

    def test_update(self) -> None:
        """The provider profile changes, and the storefront is synced."""
        updater = _updater()
        updater.api.update_data.return_value = {'IsPosted': True}
        updater.boundary.update_profile.return_value = {'status': 'OK'}

        self.assertTrue(updater.update(PROFILE_FORM))
        updater.api.update_data.assert_called_once_with(
            PROFILE_SCHEMA,
            {'email': 'ada@example.com', 'firstname': 'Ada',
             'lastname': 'Lovelace'},
            'old'
        )
        updater.boundary.update_profile.assert_called_once_with(
            {'IsPosted': True}, 'old'
        )
        updater.page.redirect.assert_called_once_with('/account')

    def test_refresh_and_retry(self) -> None:
        """An expired token is refreshed once, and the call retried."""
        updater = _updater()
        updater.api.update_data.side_effect = [EXPIRED, {'IsPosted': True}]
        updater.boundary.refresh_token.return_value = {
            'success': True, 'access_token': 'new'
        }
        updater.boundary.update_profile.return_value = {'status': 'OK'}

        self.assertTrue(updater.update(PROFILE_FORM))
        updater.boundary.refresh_token.assert_called_once_with('old')
        self.assertEqual(
            [call[0][2] for call in updater.api.update_data.call_args_list],
            ['old', 'new']
        )
        self.assertEqual(updater.store.get_token(), 'new')
        updater.boundary.update_profile.assert_called_once_with(
            {'IsPosted': True}, 'new'
        )

    def test_expired_twice(self) -> None:
        """A token that is still expired after a refresh is an error."""
        updater = _updater()
        updater.api.update_data.side_effect = EXPIRED
        updater.boundary.refresh_token.return_value = {
            'success': True, 'access_token': 'new'
        }

        self.assertFalse(updater.update(PROFILE_FORM))
        self.assertEqual(updater.api.update_data.call_count, 2)
        self.assertEqual(updater.boundary.refresh_token.call_count, 1)
        updater.page.show_error.assert_called_once_with(
            FormType.UPDATE_PROFILE, 'Access token is expired'
        )
        self.assertEqual(updater.boundary.update_profile.call_count, 0)

    def test_refresh_fails(self) -> None:
        """If the refresh fails, the call is not retried."""
        updater = _updater()
        updater.api.update_data.side_effect = EXPIRED
        updater.boundary.refresh_token.side_effect = TransportError('down')

        self.assertFalse(updater.update(PROFILE_FORM))
        self.assertEqual(updater.api.update_data.call_count, 1)
        updater.page.show_error.assert_called_once_with(
            FormType.UPDATE_PROFILE, DEFAULTS['error.unexpected']
        )

    def test_other_error(self) -> None:
        """Other provider errors are shown without a refresh."""
        updater = _updater()
        updater.api.update_data.side_effect = ProviderError(974, 'Blocked')

        self.assertFalse(updater.update(PROFILE_FORM))
        self.assertEqual(updater.boundary.refresh_token.call_count, 0)
        updater.page.show_error.assert_called_once_with(
            FormType.UPDATE_PROFILE, 'Blocked'
        )

    def test_required(self) -> None:
        """Blank fields are flagged, and nothing is sent."""
        updater = _updater()

        self.assertFalse(updater.update(dict(PROFILE_FORM, lastName='')))
        updater.page.show_field_errors.assert_called_once_with(
            FormType.UPDATE_PROFILE,
            {'lastName': DEFAULTS['error.required']}
        )
        self.assertEqual(updater.api.update_data.call_count, 0)

    def test_sync_fails(self) -> None:
        """If the storefront can't be synced, the customer stays put."""
        updater = _updater()
        updater.api.update_data.return_value = {'IsPosted': True}
        updater.boundary.update_profile.return_value = {'status': 'ERROR'}

        self.assertFalse(updater.update(PROFILE_FORM))
        updater.page.show_error.assert_called_once_with(
            FormType.UPDATE_PROFILE, DEFAULTS['error.profileupdate']
        )
        self.assertEqual(updater.page.redirect.call_count, 0)


class TestPasswordChanger(TestCase):
    """:meth:`PasswordChanger.change` changes the provider password."""

    def test_change(self) -> None:
        changer = _updater(PasswordChanger)
        changer.api.change_password.return_value = {'IsPosted': True}

        self.assertTrue(changer.change(PASSWORD_FORM))
        changer.api.change_password.assert_called_once_with(
            {'oldpassword': 'old', 'newpassword': 'new',
             'confirmpassword': 'new'},
            'old'
        )
        changer.page.redirect.assert_called_once_with('/account')

    def test_required(self) -> None:
        """Every blank field is flagged."""
        changer = _updater(PasswordChanger)

        self.assertFalse(changer.change({'currentPassword': 'old'}))
        fields = changer.page.show_field_errors.call_args[0][1]
        self.assertEqual(set(fields), {'newPassword', 'confirmNewPassword'})
        self.assertEqual(changer.api.change_password.call_count, 0)
