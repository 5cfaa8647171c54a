"""Defines the core data structures for the LoginRadius bridge."""

from typing import Any, Dict, List, NamedTuple, Optional

from .exceptions import ValidationError


class ErrorCodes:
    """LoginRadius ``ErrorCode`` values that the bridge acts on."""

    INVALID_REFRESH_TOKEN = 905
    """The refresh token is invalid. Terminal."""

    TOKEN_EXPIRED = 906
    """The access token has expired. Triggers refresh-and-retry."""

    EMAIL_ALREADY_REGISTERED = 936
    """Registration with an email address that is already in use."""


class ServiceCallResult(NamedTuple):
    """Parsed outcome of a call to the LoginRadius API."""

    payload: Dict[str, Any]
    """The decoded JSON body."""

    status_code: int = 200
    """HTTP status of the response."""

    @property
    def error_code(self) -> Optional[int]:
        """The provider's ``ErrorCode``, if the call failed."""
        code = self.payload.get('ErrorCode')
        if code is None or code == '':
            return None
        try:
            return int(code)
        except (TypeError, ValueError):
            return -1

    @property
    def ok(self) -> bool:
        """True if the payload carries no ``ErrorCode``."""
        return self.error_code is None

    @property
    def description(self) -> str:
        """Customer-facing description of the failure."""
        return str(self.payload.get('Description')
                   or self.payload.get('Message')
                   or self.payload.get('message')
                   or '')


class TokenPair(NamedTuple):
    """The result of a successful token refresh."""

    access_token: str
    refresh_token: Optional[str] = None


class EmailEntry(NamedTuple):
    """One of the typed email addresses on a LoginRadius profile."""

    PRIMARY = 'Primary'

    type: str
    value: str


class RemoteProfile(NamedTuple):
    """The identity provider's record of a customer."""

    uid: str
    """LoginRadius UID. Joins to :attr:`LocalCustomer.login`."""

    id: Optional[str] = None
    """LoginRadius internal ID."""

    emails: List[EmailEntry] = []
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_verified: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'RemoteProfile':
        """Build a profile from a LoginRadius account payload."""
        uid = payload.get('Uid')
        if not uid:
            raise ValidationError('Profile has no UID')
        emails = [
            EmailEntry(type=entry.get('Type') or '',
                       value=entry.get('Value') or '')
            for entry in (payload.get('Email') or [])
            if isinstance(entry, dict)
        ]
        return cls(
            uid=str(uid),
            id=payload.get('ID'),
            emails=emails,
            first_name=payload.get('FirstName'),
            last_name=payload.get('LastName'),
            email_verified=bool(payload.get('EmailVerified', False))
        )

    @property
    def primary_email(self) -> str:
        """
        The address to use for the local customer.

        The entry tagged ``Primary`` wins. Profiles without a Primary tag do
        occur, in which case the first entry is used.

        Raises
        ------
        :class:`.ValidationError`
            If the profile has no email addresses at all.

        """
        for entry in self.emails:
            if entry.type == EmailEntry.PRIMARY and entry.value:
                return entry.value
        if self.emails and self.emails[0].value:
            return self.emails[0].value
        raise ValidationError('Profile has no email address',
                              {'Email': self.emails})

    @property
    def tagged_primary_email(self) -> Optional[str]:
        """The ``Primary``-tagged address, with no fallback."""
        for entry in self.emails:
            if entry.type == EmailEntry.PRIMARY and entry.value:
                return entry.value
        return None


class LocalCustomer(NamedTuple):
    """The storefront's customer record."""

    customer_id: int
    login: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    loginradius_id: Optional[str] = None
    loginradius_uid: Optional[str] = None


class AuthStatus(NamedTuple):
    """Outcome of a local authentication."""

    AUTH_OK = 'AUTH_OK'

    status: str
    customer_id: int


class CustomerSession(NamedTuple):
    """A logged-in local customer."""

    customer: LocalCustomer
    remember_me: bool
    login_time: int
    """Epoch time."""


class WidgetSettings(NamedTuple):
    """Everything the browser needs to set up the LoginRadius widgets."""

    enabled: bool
    key: str
    site_name: str
    reset_password_url: Optional[str] = None
    recaptcha_site_key: str = ''
    script_url: str = ''
    start_url: str = ''
    update_profile_url: str = ''
    sott_url: str = ''
    refresh_url: str = ''
    password_reset_success_url: str = ''
    forwarding_url: str = ''
    account_home_url: str = ''
    email_used_message: Optional[str] = None
    messages: Dict[str, str] = {}

    def to_dict(self) -> Dict[str, Any]:
        """Settings as exposed to the browser."""
        return dict(self._asdict())
