"""
Reconciles LoginRadius profiles with storefront customers.

The LoginRadius UID is the customer's login. A customer is created the first
time a UID logs in; after that, each login or profile change writes the
profile's name, email, and LoginRadius identifiers through to the customer.

The store requires every customer to have a password and a credential
lifecycle. LoginRadius is the real authenticator, so the bridge generates a
throwaway password, sets it via a reset token, and authenticates with it
immediately. All of that happens in one transaction with the profile update
and login: either all of it is persisted or none of it.
"""

import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from ... import logging
from ...domain import AuthStatus, CustomerSession, LocalCustomer, \
    RemoteProfile
from ...exceptions import AuthenticationFailed, CustomerConflict, \
    InvalidResetToken, NoSuchCustomer, Unavailable
from . import passwords, util
from .models import DBCustomer, DBCustomerCredential, db

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(minutes=30)


def _to_domain(db_customer: DBCustomer) -> LocalCustomer:
    return LocalCustomer(
        customer_id=db_customer.customer_id,
        login=db_customer.login,
        email=db_customer.email,
        first_name=db_customer.first_name,
        last_name=db_customer.last_name,
        loginradius_id=db_customer.loginradius_id,
        loginradius_uid=db_customer.loginradius_uid
    )


def _get_db_customer(login: str) -> Optional[DBCustomer]:
    stmt = select(DBCustomer).where(DBCustomer.login == login)
    db_customer: Optional[DBCustomer] = db.session.scalar(stmt)
    return db_customer


def get_customer_by_login(login: str) -> Optional[LocalCustomer]:
    """
    Get the customer whose login is ``login``.

    Raises
    ------
    :class:`.Unavailable`
        When there is a problem querying the database.

    """
    try:
        db_customer = _get_db_customer(login)
    except OperationalError as e:
        raise Unavailable(f'Could not query database: {e.detail}') from e
    if db_customer is None:
        return None
    return _to_domain(db_customer)


def get_customer(customer_id: int) -> Optional[LocalCustomer]:
    """Get a customer by id."""
    try:
        db_customer = db.session.get(DBCustomer, customer_id)
    except OperationalError as e:
        raise Unavailable(f'Could not query database: {e.detail}') from e
    if db_customer is None:
        return None
    return _to_domain(db_customer)


def create_customer(login: str, password: str) -> DBCustomer:
    """
    Add a new customer to the current transaction.

    Raises
    ------
    :class:`.CustomerConflict`
        If a customer with this login already exists.

    """
    db_customer = DBCustomer(login=login, created=util.now())
    db_customer.credentials = DBCustomerCredential(
        password_enc=passwords.hash_password(password)
    )
    db.session.add(db_customer)
    try:
        db.session.flush()
    except IntegrityError as e:
        raise CustomerConflict(f'Customer {login} already exists') from e
    logger.debug('Created customer %s', db_customer.customer_id)
    return db_customer


def create_reset_password_token(db_customer: DBCustomer) -> str:
    """Issue a password reset token for a customer."""
    token = secrets.token_urlsafe(32)
    if db_customer.credentials is None:
        db_customer.credentials = DBCustomerCredential()
    db_customer.credentials.reset_token = token
    db_customer.credentials.reset_token_expires = \
        util.now() + int(RESET_TOKEN_TTL.total_seconds())
    return token


def set_password_with_token(db_customer: DBCustomer, token: str,
                            password: str) -> None:
    """
    Set a customer's password using a reset token.

    Raises
    ------
    :class:`.InvalidResetToken`
        If the token doesn't match, or has expired.

    """
    credentials = db_customer.credentials
    if credentials is None or not credentials.reset_token \
            or not secrets.compare_digest(credentials.reset_token, token):
        raise InvalidResetToken('Reset token does not match')
    if credentials.reset_token_expires < util.now():
        raise InvalidResetToken('Reset token has expired')
    credentials.password_enc = passwords.hash_password(password)
    credentials.reset_token = None
    credentials.reset_token_expires = 0


def authenticate_customer(login: str, password: str) -> AuthStatus:
    """
    Check a customer's local credentials.

    Raises
    ------
    :class:`.AuthenticationFailed`
        If there is no such customer or the password is wrong.

    """
    db_customer = _get_db_customer(login)
    if db_customer is None or db_customer.credentials is None:
        raise AuthenticationFailed('No such customer')
    passwords.check_password(password, db_customer.credentials.password_enc)
    return AuthStatus(AuthStatus.AUTH_OK, db_customer.customer_id)


def login_customer(db_customer: DBCustomer, auth_status: AuthStatus,
                   remember_me: bool) -> CustomerSession:
    """Log an authenticated customer in."""
    if auth_status.status != AuthStatus.AUTH_OK \
            or auth_status.customer_id != db_customer.customer_id:
        raise AuthenticationFailed('Customer is not authenticated')
    login_time = util.now()
    db_customer.last_login = login_time
    db_customer.remember_me = remember_me
    return CustomerSession(customer=_to_domain(db_customer),
                           remember_me=remember_me, login_time=login_time)


def _apply_profile(db_customer: DBCustomer, profile: RemoteProfile) -> None:
    db_customer.email = profile.primary_email
    db_customer.first_name = profile.first_name
    db_customer.last_name = profile.last_name
    db_customer.loginradius_id = profile.id
    db_customer.loginradius_uid = profile.uid


def link_or_create(profile: RemoteProfile,
                   remember_me: bool = False) -> CustomerSession:
    """
    Log in the customer for a LoginRadius profile, creating them if needed.

    Parameters
    ----------
    profile : :class:`.RemoteProfile`
    remember_me : bool

    Returns
    -------
    :class:`.CustomerSession`

    Raises
    ------
    :class:`.CustomerConflict`
        If a concurrent request created the same customer first. Nothing is
        persisted; trying again will take the update path.
    :class:`.Unavailable`
        When there is a problem talking to the database.
    :class:`.ValidationError`
        If the profile has no email address.

    """
    password = passwords.generate_password()
    try:
        with util.transaction():
            db_customer = _get_db_customer(profile.uid)
            if db_customer is None:
                db_customer = create_customer(profile.uid, password)
            token = create_reset_password_token(db_customer)
            set_password_with_token(db_customer, token, password)
            auth_status = authenticate_customer(profile.uid, password)
            _apply_profile(db_customer, profile)
            customer_session = login_customer(db_customer, auth_status,
                                              remember_me)
    except OperationalError as e:
        raise Unavailable(f'Could not update database: {e.detail}') from e
    logger.info('Customer %s logged in', customer_session.customer.customer_id)
    return customer_session


def update_existing(profile: RemoteProfile) -> LocalCustomer:
    """
    Write a changed LoginRadius profile through to its customer.

    Raises
    ------
    :class:`.NoSuchCustomer`
        If no customer has the profile's UID as login. Nothing is created.
    :class:`.Unavailable`
        When there is a problem talking to the database.

    """
    try:
        with util.transaction():
            db_customer = _get_db_customer(profile.uid)
            if db_customer is None:
                raise NoSuchCustomer(f'No customer with login {profile.uid}')
            _apply_profile(db_customer, profile)
            customer = _to_domain(db_customer)
    except OperationalError as e:
        raise Unavailable(f'Could not update database: {e.detail}') from e
    return customer
