"""Tests for :mod:`loginradius_bridge.services.customers`."""

from unittest import TestCase, mock

from sqlalchemy import func, select

from loginradius_bridge.domain import EmailEntry, RemoteProfile
from loginradius_bridge.exceptions import AuthenticationFailed, \
    CustomerConflict, InvalidResetToken, NoSuchCustomer, ValidationError
from loginradius_bridge.factory import create_web_app
from loginradius_bridge.services import customers
from loginradius_bridge.services.customers import passwords, util
from loginradius_bridge.services.customers.models import DBCustomer, db

from typing import Any


def _profile(**kwargs: Any) -> RemoteProfile:
    data = dict(uid='u1', id='id1', first_name='Ada', last_name='Lovelace',
                emails=[EmailEntry('Primary', 'ada@example.com')])
    data.update(kwargs)
    return RemoteProfile(**data)


class CustomerStoreTestCase(TestCase):
    """Runs each test against an empty in-memory customer store."""

    def setUp(self) -> None:
        self.app = create_web_app({
            'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        })
        self.ctx = self.app.app_context()
        self.ctx.push()
        util.create_all()

    def tearDown(self) -> None:
        db.session.remove()
        util.drop_all()
        self.ctx.pop()

    def count(self) -> int:
        return int(db.session.scalar(
            select(func.count()).select_from(DBCustomer)
        ))


class TestLinkOrCreate(CustomerStoreTestCase):
    """:func:`customers.link_or_create` logs a profile's customer in."""

    def test_creates_customer(self) -> None:
        """The first login creates a customer whose login is the UID."""
        session = customers.link_or_create(_profile(), remember_me=True)

        self.assertEqual(self.count(), 1)
        customer = customers.get_customer_by_login('u1')
        self.assertEqual(customer, session.customer)
        self.assertEqual(customer.email, 'ada@example.com')
        self.assertEqual(customer.first_name, 'Ada')
        self.assertEqual(customer.last_name, 'Lovelace')
        self.assertEqual(customer.loginradius_id, 'id1')
        self.assertEqual(customer.loginradius_uid, 'u1')
        self.assertTrue(session.remember_me)
        self.assertGreater(session.login_time, 0)

    def test_primary_email(self) -> None:
        """The Primary-tagged address wins over earlier entries."""
        customers.link_or_create(_profile(emails=[
            EmailEntry('Secondary', 'a@x.com'),
            EmailEntry('Primary', 'b@x.com'),
        ]))
        self.assertEqual(customers.get_customer_by_login('u1').email,
                         'b@x.com')

    def test_no_primary_email(self) -> None:
        """Without a Primary tag, the first address is used."""
        customers.link_or_create(_profile(emails=[
            EmailEntry('Secondary', 'a@x.com'),
        ]))
        self.assertEqual(customers.get_customer_by_login('u1').email,
                         'a@x.com')

    def test_no_email(self) -> None:
        """A profile without any address is rejected, and nothing is kept."""
        with self.assertRaises(ValidationError):
            customers.link_or_create(_profile(emails=[]))
        self.assertEqual(self.count(), 0)

    def test_idempotent(self) -> None:
        """Logging in twice updates the one customer."""
        first = customers.link_or_create(_profile())
        second = customers.link_or_create(_profile(first_name='Augusta'))

        self.assertEqual(self.count(), 1)
        self.assertEqual(first.customer.customer_id,
                         second.customer.customer_id)
        self.assertEqual(customers.get_customer_by_login('u1').first_name,
                         'Augusta')

    def test_atomic(self) -> None:
        """If local authentication fails, the new customer is not kept."""
        with mock.patch.object(customers, 'authenticate_customer') as authn:
            authn.side_effect = AuthenticationFailed('nope')
            with self.assertRaises(AuthenticationFailed):
                customers.link_or_create(_profile())
        self.assertEqual(self.count(), 0)
        self.assertIsNone(customers.get_customer_by_login('u1'))

    def test_atomic_login_step(self) -> None:
        """If the login step fails, profile changes are not kept either."""
        customers.link_or_create(_profile())
        with mock.patch.object(customers, 'login_customer') as login:
            login.side_effect = RuntimeError('store down')
            with self.assertRaises(RuntimeError):
                customers.link_or_create(_profile(last_name='King'))
        self.assertEqual(customers.get_customer_by_login('u1').last_name,
                         'Lovelace')


class TestUpdateExisting(CustomerStoreTestCase):
    """:func:`customers.update_existing` never creates a customer."""

    def test_no_customer(self) -> None:
        """An unknown UID is :class:`.NoSuchCustomer`, and nothing changes."""
        with self.assertRaises(NoSuchCustomer):
            customers.update_existing(_profile())
        self.assertEqual(self.count(), 0)

    def test_updates(self) -> None:
        """Profile fields are written through."""
        customers.link_or_create(_profile())
        customer = customers.update_existing(_profile(
            last_name='King', emails=[EmailEntry('Primary', 'ak@x.com')]
        ))
        self.assertEqual(customer.last_name, 'King')
        self.assertEqual(customer.email, 'ak@x.com')
        self.assertEqual(customers.get_customer_by_login('u1'), customer)


class TestCredentials(CustomerStoreTestCase):
    """The local credential lifecycle."""

    def test_duplicate_login(self) -> None:
        """The store rejects a second customer with the same login."""
        with util.transaction():
            customers.create_customer('u1', 'pw')
        with self.assertRaises(CustomerConflict):
            with util.transaction():
                customers.create_customer('u1', 'pw')
        self.assertEqual(self.count(), 1)

    def test_reset_token(self) -> None:
        """A password can only be set with the issued reset token."""
        with util.transaction():
            db_customer = customers.create_customer('u1', 'pw')
            token = customers.create_reset_password_token(db_customer)
            with self.assertRaises(InvalidResetToken):
                customers.set_password_with_token(db_customer, 'wrong', 'x')
            customers.set_password_with_token(db_customer, token, 'new-pw')
        status = customers.authenticate_customer('u1', 'new-pw')
        self.assertEqual(status.status, 'AUTH_OK')
        with self.assertRaises(AuthenticationFailed):
            customers.authenticate_customer('u1', 'pw')

    def test_expired_reset_token(self) -> None:
        """An expired reset token is refused."""
        with util.transaction():
            db_customer = customers.create_customer('u1', 'pw')
            token = customers.create_reset_password_token(db_customer)
            db_customer.credentials.reset_token_expires = 1
            with self.assertRaises(InvalidResetToken):
                customers.set_password_with_token(db_customer, token, 'x')


class TestPasswords(TestCase):
    """Local passwords are stored salted and hashed."""

    def test_check_password(self) -> None:
        """The right password checks out; a wrong one does not."""
        encrypted = passwords.hash_password('foo')
        self.assertNotIn('foo', encrypted)
        self.assertTrue(passwords.check_password('foo', encrypted))
        with self.assertRaises(AuthenticationFailed):
            passwords.check_password('bar', encrypted)

    def test_salted(self) -> None:
        """The same password hashes differently each time."""
        self.assertNotEqual(passwords.hash_password('foo'),
                            passwords.hash_password('foo'))
