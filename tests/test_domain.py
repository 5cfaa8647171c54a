"""Tests for :mod:`loginradius_bridge.domain` and friends."""

from unittest import TestCase, mock

import requests
from flask import Flask

from loginradius_bridge import logging
from loginradius_bridge.domain import RemoteProfile, ServiceCallResult, \
    WidgetSettings
from loginradius_bridge.exceptions import TransportError, ValidationError
from loginradius_bridge.messages import DEFAULTS, msg
from loginradius_bridge.token_store import InMemoryTokenStore, \
    RequestTokenStore
from loginradius_bridge.widgets.boundary import ServerBoundary


class TestServiceCallResult(TestCase):
    def test_ok(self) -> None:
        result = ServiceCallResult({'Uid': 'u1'})
        self.assertTrue(result.ok)
        self.assertIsNone(result.error_code)

    def test_error_code(self) -> None:
        """Provider error codes sometimes arrive as strings."""
        result = ServiceCallResult({'ErrorCode': '906',
                                    'Description': 'Expired'}, 403)
        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, 906)
        self.assertEqual(result.description, 'Expired')


class TestRemoteProfile(TestCase):
    """:meth:`RemoteProfile.from_payload` reads a LoginRadius account."""

    def test_from_payload(self) -> None:
        profile = RemoteProfile.from_payload({
            'Uid': 'u1', 'ID': 'id1', 'FirstName': 'Ada',
            'Email': [{'Type': 'Primary', 'Value': 'ada@example.com'}],
            'EmailVerified': True,
        })
        self.assertEqual(profile.uid, 'u1')
        self.assertEqual(profile.primary_email, 'ada@example.com')
        self.assertIsNone(profile.last_name)
        self.assertTrue(profile.email_verified)

    def test_no_uid(self) -> None:
        with self.assertRaises(ValidationError):
            RemoteProfile.from_payload({'ID': 'id1'})

    def test_tagged_primary_email(self) -> None:
        """No fallback to the first address."""
        profile = RemoteProfile.from_payload({
            'Uid': 'u1', 'Email': [{'Type': 'Other', 'Value': 'a@x.com'}]
        })
        self.assertIsNone(profile.tagged_primary_email)
        self.assertEqual(profile.primary_email, 'a@x.com')


class TestTokenStores(TestCase):
    """Both token stores keep one token and a remember-me flag."""

    def test_in_memory(self) -> None:
        store = InMemoryTokenStore()
        self.assertIsNone(store.get_token())
        self.assertFalse(store.get_remember_me())
        store.set_token('tok')
        store.set_remember_me(True)
        self.assertEqual(store.get_token(), 'tok')
        self.assertTrue(store.get_remember_me())
        store.set_token(None)
        self.assertIsNone(store.get_token())

    def test_request_scoped(self) -> None:
        """The server-side store forgets the token after the request."""
        app = Flask('test')
        with app.test_request_context():
            store = RequestTokenStore()
            store.set_token('tok')
            self.assertEqual(RequestTokenStore().get_token(), 'tok')
        with app.test_request_context():
            self.assertIsNone(RequestTokenStore().get_token())


class TestMessages(TestCase):
    def test_override(self) -> None:
        self.assertEqual(msg('error.required', {'error.required': 'Requis'}),
                         'Requis')
        self.assertEqual(msg('error.required', {}),
                         DEFAULTS['error.required'])


class TestMask(TestCase):
    """Secrets never reach the log."""

    def test_mask(self) -> None:
        masked = logging.mask({'apikey': 'key', 'apisecret': 'sec',
                               'nested': {'access_token': 'tok'}})
        self.assertEqual(masked, {'apikey': 'key', 'apisecret': '****',
                                  'nested': {'access_token': '****'}})

    def test_format_response(self) -> None:
        """Key names survive; secret values don't."""
        text = logging.format_response({'access_token': 'tok',
                                        'Uid': 'u1'})
        self.assertEqual(text, '\naccess_token: ****\nUid: u1')


class TestServerBoundary(TestCase):
    """:class:`ServerBoundary` calls the bridge from the page."""

    def setUp(self) -> None:
        self.settings = WidgetSettings(enabled=True, key='key',
                                       site_name='shop',
                                       start_url='/loginradius/start',
                                       refresh_url='/loginradius/refresh')
        self.session = mock.MagicMock(spec=requests.Session)
        self.boundary = ServerBoundary('https://shop.example.com/',
                                       self.settings, session=self.session)

    def test_start_session(self) -> None:
        self.session.request.return_value.json.return_value = \
            {'status': 'OK'}
        result = self.boundary.start_session({'access_token': 'tok'})

        self.assertEqual(result, {'status': 'OK'})
        method, url = self.session.request.call_args[0]
        self.assertEqual(method, 'POST')
        self.assertEqual(url, 'https://shop.example.com/loginradius/start')
        self.assertEqual(self.session.request.call_args[1]['data'],
                         {'response': '{"access_token": "tok"}'})

    def test_refresh_token(self) -> None:
        self.session.request.return_value.json.return_value = \
            {'success': True, 'access_token': 'new'}
        self.boundary.refresh_token('old', 'rt')
        self.assertEqual(self.session.request.call_args[1]['params'],
                         {'access_token': 'old', 'refresh_token': 'rt'})

    def test_unreachable(self) -> None:
        self.session.request.side_effect = \
            requests.exceptions.ConnectionError('down')
        with self.assertRaises(TransportError):
            self.boundary.refresh_token('old')

    def test_not_json(self) -> None:
        self.session.request.return_value.json.side_effect = \
            ValueError('nope')
        with self.assertRaises(TransportError):
            self.boundary.start_session({})
