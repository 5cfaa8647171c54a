"""Flask configuration."""
import os
import secrets

VERSION = '0.3'
"""The application version."""

#################### LoginRadius ####################
LOGINRADIUS_ENABLED = bool(int(os.environ.get('LOGINRADIUS_ENABLED', '1')))
"""Master switch. When off, the identity endpoints answer 404."""

LOGINRADIUS_API_KEY = os.environ.get('LOGINRADIUS_API_KEY')
"""Public API key of the LoginRadius app. Also handed to the widgets."""

LOGINRADIUS_API_SECRET = os.environ.get('LOGINRADIUS_API_SECRET')
"""Shared secret for the management API. Never sent to the browser."""

LOGINRADIUS_API_URL = os.environ.get('LOGINRADIUS_API_URL',
                                     'https://api.loginradius.com/')
"""Root of the LoginRadius REST API. Must end with a slash."""

LOGINRADIUS_SCRIPT_URL = os.environ.get(
    'LOGINRADIUS_SCRIPT_URL',
    'https://auth.lrcontent.com/v2/js/LoginRadiusV2.js'
)
"""Source of the hosted widget library."""

LOGINRADIUS_SITE_NAME = os.environ.get('LOGINRADIUS_SITE_NAME', '')
"""LoginRadius app name (``appName`` in the widget options)."""

LOGINRADIUS_RESET_PASSWORD_URL = os.environ.get(
    'LOGINRADIUS_RESET_PASSWORD_URL'
)
"""Where the forgot-password email sends the customer.

If not set, the LoginRadius app's default is used."""

LOGINRADIUS_DEBUG = bool(int(os.environ.get('LOGINRADIUS_DEBUG', '0')))
"""Log call parameters and raw responses (secrets masked)."""

LOGINRADIUS_RECAPTCHA_SITE_KEY = os.environ.get(
    'LOGINRADIUS_RECAPTCHA_SITE_KEY', ''
)
"""Google reCAPTCHA v2 site key for the registration widget."""

LOGINRADIUS_TIMEOUT = float(os.environ.get('LOGINRADIUS_TIMEOUT', '10'))
"""Seconds before an outbound call to LoginRadius is abandoned."""

LOGINRADIUS_MAX_RETRIES = int(os.environ.get('LOGINRADIUS_MAX_RETRIES', '2'))
"""Connection-level retries for outbound calls."""

LOGINRADIUS_EMAIL_USED_MESSAGE = os.environ.get(
    'LOGINRADIUS_EMAIL_USED_MESSAGE',
    'An account with this email address already exists. Try logging in, or'
    ' reset your password.'
)
"""Friendly replacement for provider error 936 (email already registered)."""

LOGINRADIUS_MESSAGES: dict = {}
"""Overrides for the customer-facing messages in :mod:`.messages`."""

#################### Storefront ####################
LOGIN_FORWARDING_URL = os.environ.get('LOGIN_FORWARDING_URL', '/account')
"""Where the browser goes after logging in from the login page."""

CHECKOUT_FORWARDING_URL = os.environ.get('CHECKOUT_FORWARDING_URL',
                                         '/checkout')
"""Where the browser goes after logging in from the checkout page."""

ACCOUNT_HOME_URL = os.environ.get('ACCOUNT_HOME_URL', '/account')
"""Where the browser goes after a profile or password change."""

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///:memory:')
"""The customer store."""

SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '0')))
"""Create the customer tables on startup."""

#################### Minor configs ####################
SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key used for sessions."""

SESSION_COOKIE_SECURE = bool(int(os.environ.get('SESSION_COOKIE_SECURE', '1')))

PERMANENT_SESSION_LIFETIME = int(os.environ.get('PERMANENT_SESSION_LIFETIME',
                                                str(60 * 60 * 24 * 30)))
"""Lifetime of a remember-me session, in seconds."""

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
LOGFILE = os.environ.get('LOGFILE')
