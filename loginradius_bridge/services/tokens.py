"""
Obtains a new access token when LoginRadius reports that one has expired.

Refresh is a two-step exchange: an (expired) access token is traded for a
refresh token, which is then traded for a new access token. Callers that
already hold a refresh token skip the first step. Refresh is only ever done
in response to an :const:`.ErrorCodes.TOKEN_EXPIRED` seen elsewhere.
"""

from typing import Optional

from .. import logging
from ..domain import ErrorCodes, ServiceCallResult, TokenPair
from ..exceptions import RefreshError, TransportError
from ..token_store import TokenStore
from . import provider

logger = logging.getLogger(__name__)


class RefreshCoordinator(object):
    """Runs the refresh exchange against a :class:`.ProviderSession`."""

    def __init__(self, session: provider.ProviderSession,
                 store: Optional[TokenStore] = None) -> None:
        self.session = session
        self.store = store

    def _check(self, step: str, result: ServiceCallResult) -> None:
        if result.ok:
            return
        if result.error_code == ErrorCodes.INVALID_REFRESH_TOKEN:
            logger.error('%s: invalid refresh token', step)
        else:
            logger.error('%s failed with error code %s: %s', step,
                         result.error_code, result.description)
        raise RefreshError(f'{step} failed ({result.error_code})')

    def refresh(self, access_token: str,
                refresh_token: Optional[str] = None) -> TokenPair:
        """
        Get a new access token.

        Parameters
        ----------
        access_token : str
            The token that LoginRadius reported as expired.
        refresh_token : str
            If known, the mint step is skipped.

        Returns
        -------
        :class:`.TokenPair`

        Raises
        ------
        :class:`.RefreshError`
            If either step reports an error code, or the provider could not
            be reached.

        """
        try:
            if not refresh_token:
                minted = self.session.mint_refresh_token(access_token)
                self._check('Mint refresh token', minted)
                refresh_token = minted.payload.get('refresh_token')
                if not refresh_token:
                    logger.error('Mint refresh token returned no token')
                    raise RefreshError('No refresh token issued')

            exchanged = self.session.exchange_refresh_token(refresh_token)
            self._check('Exchange refresh token', exchanged)
        except TransportError as e:
            raise RefreshError('Could not refresh access token') from e

        new_token = exchanged.payload.get('access_token')
        if not new_token:
            logger.error('Exchange refresh token returned no access token')
            raise RefreshError('No access token issued')
        pair = TokenPair(access_token=new_token,
                         refresh_token=exchanged.payload.get('refresh_token'))
        if self.store is not None:
            self.store.set_token(pair.access_token)
        logger.debug('Access token refreshed')
        return pair


def refresh_access_token(access_token: str,
                         refresh_token: Optional[str] = None,
                         store: Optional[TokenStore] = None) -> TokenPair:
    """Refresh an access token using the current provider session."""
    return RefreshCoordinator(provider.current_session(), store) \
        .refresh(access_token, refresh_token)
