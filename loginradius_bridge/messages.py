"""Customer-facing messages, overridable per site."""

from typing import Mapping, Optional

DEFAULTS = {
    'error.unexpected': 'An unexpected error occurred. Please try again'
                        ' later.',
    'error.scriptload': 'There was an error loading third party scripts.'
                        ' Please try logging in again later.',
    'error.required': 'This field is required.',
    'error.profileupdate': 'Error occurred updating profile.',
    'notice.forgotpassword': 'Success! Check your email for password reset'
                             ' instructions.',
    'notice.passwordreset': 'Your password has been changed. Please use your'
                            ' new password the next time you log in.',
}


def msg(key: str, catalog: Optional[Mapping[str, str]] = None) -> str:
    """Look up a message, preferring the site's own translation."""
    if catalog and catalog.get(key):
        return catalog[key]
    return DEFAULTS[key]
