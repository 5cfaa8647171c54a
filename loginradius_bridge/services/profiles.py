"""
Resolves an access token to the customer's LoginRadius profile.

An expired token (:const:`.ErrorCodes.TOKEN_EXPIRED`) is refreshed and the
lookup retried once. A second expiry, or any other error code, is a failure;
the provider's detail goes to the log and callers get
:class:`.UnexpectedError`.
"""

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

from .. import logging
from ..domain import EmailEntry, ErrorCodes, RemoteProfile, ServiceCallResult
from ..exceptions import (RefreshError, TransportError, UnexpectedError,
                          ValidationError)
from ..token_store import InMemoryTokenStore, TokenStore
from . import provider
from .tokens import RefreshCoordinator

logger = logging.getLogger(__name__)

MAX_REFRESHES = 1
"""Refresh-and-retry happens at most this many times per resolution."""


class FetchOutcome(Enum):
    """How a single profile lookup went."""

    OK = 'ok'
    NEEDS_REFRESH = 'needs_refresh'
    FAILED = 'failed'


class FetchResult(NamedTuple):
    """A profile lookup, classified."""

    outcome: FetchOutcome
    result: Optional[ServiceCallResult] = None


class ProfileResolver(object):
    """Fetches profiles by access token, refreshing the token on expiry."""

    def __init__(self, session: provider.ProviderSession,
                 refresher: RefreshCoordinator) -> None:
        self.session = session
        self.refresher = refresher

    def fetch(self, access_token: str) -> FetchResult:
        """Look up the account for ``access_token`` once."""
        try:
            result = self.session.get_profile_by_token(access_token)
        except TransportError as e:
            logger.error('Profile lookup failed: %s', e)
            return FetchResult(FetchOutcome.FAILED)
        if result.ok:
            return FetchResult(FetchOutcome.OK, result)
        if result.error_code == ErrorCodes.TOKEN_EXPIRED:
            return FetchResult(FetchOutcome.NEEDS_REFRESH, result)
        return FetchResult(FetchOutcome.FAILED, result)

    def resolve(self, access_token: str) -> RemoteProfile:
        """
        Get the profile for an access token.

        Parameters
        ----------
        access_token : str

        Returns
        -------
        :class:`.RemoteProfile`

        Raises
        ------
        :class:`.UnexpectedError`
            If the profile could not be obtained.

        """
        if not access_token:
            logger.error('No access token to resolve')
            raise UnexpectedError('No access token')

        refreshes = 0
        while True:
            fetched = self.fetch(access_token)
            if fetched.outcome is FetchOutcome.OK:
                break
            if fetched.outcome is FetchOutcome.NEEDS_REFRESH \
                    and refreshes < MAX_REFRESHES:
                refreshes += 1
                try:
                    access_token = self.refresher.refresh(access_token)\
                        .access_token
                except RefreshError as e:
                    logger.error('Could not refresh expired token: %s', e)
                    raise UnexpectedError('Token refresh failed') from e
                continue
            if fetched.result is not None:
                logger.error('Profile lookup failed with error code %s: %s',
                             fetched.result.error_code,
                             logging.format_response(fetched.result.payload))
            raise UnexpectedError('Could not get profile')

        try:
            return RemoteProfile.from_payload(fetched.result.payload)
        except ValidationError as e:
            logger.error('Unusable profile: %s', e)
            raise UnexpectedError('Unusable profile') from e


def get_resolver(store: Optional[TokenStore] = None) -> ProfileResolver:
    """A resolver bound to the current provider session."""
    session = provider.current_session()
    return ProfileResolver(session, RefreshCoordinator(session, store))


def get_remote_profile(access_token: str,
                       store: Optional[TokenStore] = None) -> RemoteProfile:
    """Resolve an access token using the current provider session."""
    return get_resolver(store).resolve(access_token)


def unverify_account(access_token: str) -> Dict[str, Any]:
    """
    Mark the email address on the customer's account as not verified.

    LoginRadius verifies the address when a password is reset from the
    forgot-password email, after which the customer can no longer change it.

    Returns
    -------
    dict
        The provider's response, or an empty dict if no profile could be
        resolved for the token.

    """
    # The lookup may refresh the token; the update needs the fresh one.
    store = InMemoryTokenStore()
    store.set_token(access_token)
    try:
        profile = get_remote_profile(access_token, store)
    except UnexpectedError:
        return {}
    result = provider.current_session().unverify_account(
        profile.uid, store.get_token() or access_token
    )
    if not result.ok:
        logger.error('Unverify account failed with error code %s: %s',
                     result.error_code, result.description)
    return result.payload


def get_editable_profile(uid: str) -> Dict[str, Optional[str]]:
    """
    Get the fields of a customer's profile that the account page can edit.

    Raises
    ------
    :class:`.UnexpectedError`
        If LoginRadius has no such account.

    """
    result = provider.get_profile_by_uid(uid)
    if not result.ok:
        logger.error('Profile lookup by UID failed with error code %s: %s',
                     result.error_code, result.description)
        raise UnexpectedError('Could not get profile')
    emails = [EmailEntry(type=entry.get('Type') or '',
                         value=entry.get('Value') or '')
              for entry in (result.payload.get('Email') or [])
              if isinstance(entry, dict)]
    profile = RemoteProfile(uid=uid, emails=emails)
    return {
        'FirstName': result.payload.get('FirstName'),
        'LastName': result.payload.get('LastName'),
        'Email': profile.tagged_primary_email
    }
