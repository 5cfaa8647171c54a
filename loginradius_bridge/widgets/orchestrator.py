"""
Sets up the LoginRadius widgets on a page and handles their results.

One :class:`WidgetOrchestrator` is built per page load. Once the widget
library has loaded it creates a widget context per form, each sharing the
common options. Registration first needs a Secure One-Time Token from the
bridge. Successful logins and registrations are posted to the bridge, which
logs the customer in; the page then moves on or shows the error.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .. import logging
from ..domain import ErrorCodes, WidgetSettings
from ..exceptions import TransportError
from ..messages import msg
from ..token_store import TokenStore
from .boundary import ServerBoundary
from .forms import FormDescriptor, FormOptions, FormType
from .loader import SCRIPT_URL, ScriptLoader
from .page import Page, WidgetContext, WidgetLibrary
from .updaters import PasswordChanger, ProfileUpdater

logger = logging.getLogger(__name__)

SOCIAL_INTERFACE_SELECTOR = '.loginradius-social-login-interface-container'
SOCIAL_INTERFACE_TEMPLATE = 'loginradiuscustom_tmpl'

SUBMITTED_FORMS = (FormType.UPDATE_PROFILE, FormType.CHANGE_PASSWORD)
"""Forms the page submits itself, rather than rendering a widget."""


def error_message(errors: List[Mapping[str, Any]],
                  email_used_message: Optional[str] = None) -> Optional[str]:
    """
    The message to show for a widget error.

    Only the first error is shown. "Email already registered" is replaced by
    ``email_used_message`` if one is configured; otherwise the provider's own
    ``Message`` (or ``message``, as reCAPTCHA spells it) is used.
    """
    if not errors:
        return None
    first = errors[0]
    if first.get('ErrorCode') == ErrorCodes.EMAIL_ALREADY_REGISTERED \
            and email_used_message:
        return email_used_message
    message = first.get('Message') or first.get('message')
    return str(message) if message else None


class WidgetOrchestrator(object):
    """Owns the widgets on one page."""

    def __init__(self, settings: WidgetSettings, library: WidgetLibrary,
                 loader: ScriptLoader, boundary: ServerBoundary,
                 store: TokenStore, page: Page) -> None:
        self.settings = settings
        self.library = library
        self.loader = loader
        self.boundary = boundary
        self.store = store
        self.page = page
        self.contexts: Dict[FormType, WidgetContext] = {}
        self._handlers: Dict[FormType, Callable[[Dict[str, Any]], Any]] = {
            FormType.LOGIN: self.handle_login,
            FormType.REGISTRATION: self.handle_registration,
            FormType.SOCIAL_LOGIN: self.handle_social_login,
            FormType.FORGOT_PASSWORD: self.handle_forgot_password,
            FormType.RESET_PASSWORD: self.handle_reset_password,
            FormType.UPDATE_PROFILE: self.submit_profile,
            FormType.CHANGE_PASSWORD: self.submit_password,
        }
        missing = set(FormType) - set(self._handlers)
        if missing:
            names = sorted(form_type.value for form_type in missing)
            raise TypeError(f'No handler for {names}')

    def _message(self, key: str) -> str:
        return msg(key, self.settings.messages)

    def common_options(self, form: Optional[FormDescriptor] = None
                       ) -> Dict[str, Any]:
        """
        Options shared by every widget context on the page.

        A key or reset-password URL declared on the form's markup wins over
        the configured one.
        """
        key, reset_password_url = None, None
        if form is not None:
            key, reset_password_url = form.key, form.reset_password_url
        reset_password_url = reset_password_url \
            or self.settings.reset_password_url
        options: Dict[str, Any] = {
            'apiKey': key or self.settings.key,
            'appName': self.settings.site_name,
            'hashTemplate': True,
            'verificationUrl': self.page.url,
        }
        if reset_password_url:
            options['resetPasswordUrl'] = reset_password_url
        return options

    def options_for(self, form: FormDescriptor) -> FormOptions:
        """The init options for a form: its container and callbacks."""
        def on_error(errors: List[Mapping[str, Any]]) -> None:
            message = error_message(errors, self.settings.email_used_message)
            if message:
                self.page.show_error(form.type, message)

        return FormOptions(container=form.container,
                           on_success=self._handlers[form.type],
                           on_error=on_error)

    def load_forms(self, forms: Iterable[FormDescriptor]) -> None:
        """Initialize ``forms`` once the widget library has loaded."""
        if not self.settings.enabled:
            logger.debug('LoginRadius disabled; not loading forms')
            return
        forms = [form for form in forms if form.enabled]

        def ready(loaded: bool) -> None:
            if loaded:
                self.init_forms(forms)
            else:
                self.page.show_error(FormType.LOGIN,
                                     self._message('error.scriptload'))

        self.loader.on_ready(ready)
        self.loader.load()

    def init_forms(self, forms: Iterable[FormDescriptor]) -> None:
        """Create a widget context for each form."""
        for form in forms:
            if form.type in SUBMITTED_FORMS:
                self.page.bind_submit(form.type, self._handlers[form.type])
                continue

            options = self.common_options(form)
            if form.type is FormType.REGISTRATION:
                # Registration can't be rendered without a SOTT.
                sott = self._get_sott()
                if sott is None:
                    self.page.show_error(form.type,
                                         self._message('error.unexpected'))
                    continue
                options['sott'] = sott
                if self.settings.recaptcha_site_key:
                    options['v2Recaptcha'] = True
                    options['v2RecaptchaSiteKey'] = \
                        self.settings.recaptcha_site_key

            context = self.library.create(options)
            if form.type is FormType.SOCIAL_LOGIN:
                context.custom_interface(
                    SOCIAL_INTERFACE_SELECTOR,
                    {'templateName': SOCIAL_INTERFACE_TEMPLATE}
                )
            context.init(form.type.value, self.options_for(form).to_dict())
            self.contexts[form.type] = context
            if form.container:
                self.page.stop_spinner(form.container)

    def _get_sott(self) -> Optional[str]:
        try:
            data = self.boundary.generate_sott()
        except TransportError as e:
            logger.error('Could not get SOTT: %s', e)
            return None
        sott = data.get('Sott')
        if not sott:
            logger.error('No SOTT in response')
            return None
        return str(sott)

    def _start_session(self, form_type: FormType,
                       response: Dict[str, Any]) -> bool:
        try:
            result = self.boundary.start_session(response)
        except TransportError as e:
            logger.error('Could not start session: %s', e)
            self.page.show_error(form_type, self._message('error.unexpected'))
            return False
        if result.get('status') == 'ERROR':
            self.page.show_error(form_type, result.get('message') or
                                 self._message('error.unexpected'))
            return False
        self.page.redirect(self.settings.forwarding_url)
        return True

    def handle_login(self, response: Dict[str, Any]) -> bool:
        """Log the customer in to the storefront after a widget login."""
        response = dict(response)
        response['remember_me'] = self.store.get_remember_me()
        if response.get('access_token'):
            self.store.set_token(response['access_token'])
        return self._start_session(FormType.LOGIN, response)

    def handle_registration(self, response: Dict[str, Any]) -> bool:
        if response.get('access_token'):
            self.store.set_token(response['access_token'])
        return self._start_session(FormType.REGISTRATION, response)

    def handle_social_login(self, response: Dict[str, Any]) -> bool:
        if response.get('access_token'):
            self.store.set_token(response['access_token'])
        return self._start_session(FormType.SOCIAL_LOGIN, response)

    def handle_forgot_password(self, response: Dict[str, Any]) -> bool:
        if not response.get('IsPosted'):
            return False
        self.page.show_notice(FormType.FORGOT_PASSWORD,
                              self._message('notice.forgotpassword'))
        return True

    def handle_reset_password(self, response: Dict[str, Any]) -> bool:
        """Tell the bridge the password was reset, and tell the customer."""
        if not response.get('IsPosted'):
            return False
        try:
            result = self.boundary.password_reset_success(
                self.store.get_token()
            )
            message = result.get('message')
        except TransportError as e:
            logger.error('Password reset success call failed: %s', e)
            message = None
        self.page.show_notice(FormType.RESET_PASSWORD,
                              message or self._message('notice.passwordreset'))
        return True

    def _api(self, form_type: FormType) -> Any:
        context = self.contexts.get(form_type)
        if context is None:
            context = self.library.create(self.common_options())
            self.contexts[form_type] = context
        return context.api

    def submit_profile(self, form_data: Dict[str, Any]) -> bool:
        updater = ProfileUpdater(self._api(FormType.UPDATE_PROFILE),
                                 self.boundary, self.store, self.page,
                                 self.settings)
        return updater.update(form_data)

    def submit_password(self, form_data: Dict[str, Any]) -> bool:
        changer = PasswordChanger(self._api(FormType.CHANGE_PASSWORD),
                                  self.boundary, self.store, self.page,
                                  self.settings)
        return changer.change(form_data)


def for_page(settings: WidgetSettings, library: WidgetLibrary,
             base_url: str, store: TokenStore, page: Page,
             inject: Optional[Callable[[str], None]] = None
             ) -> WidgetOrchestrator:
    """Build the orchestrator for one page load."""
    loader = ScriptLoader(library.is_loaded, inject,
                          script_url=settings.script_url or SCRIPT_URL)
    return WidgetOrchestrator(settings, library, loader,
                              ServerBoundary(base_url, settings), store, page)
