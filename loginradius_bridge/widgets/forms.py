"""
The LoginRadius forms a page can contain.

Pages declare widgets with ``data-lr-*`` attributes on a container element;
:meth:`FormDescriptor.from_markup` reads those. LoginRadius does no
required-field checking for the profile and password forms, so that happens
here before anything is sent.
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional

from werkzeug.datastructures import MultiDict
from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired

from ..exceptions import ValidationError


class FormType(Enum):
    """The widget forms LoginRadius provides."""

    LOGIN = 'login'
    REGISTRATION = 'registration'
    FORGOT_PASSWORD = 'forgotPassword'
    RESET_PASSWORD = 'resetPassword'
    UPDATE_PROFILE = 'updateProfile'
    CHANGE_PASSWORD = 'changePassword'
    SOCIAL_LOGIN = 'socialLogin'


class FormOptions(NamedTuple):
    """Options passed to the widget library when a form is initialized."""

    container: Optional[str] = None
    on_success: Optional[Callable[[Dict[str, Any]], None]] = None
    on_error: Optional[Callable[[list], None]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'container': self.container, 'onSuccess': self.on_success,
                'onError': self.on_error}


class FormDescriptor(NamedTuple):
    """A form on the page, and what it needs from the widget library."""

    type: FormType
    container: Optional[str] = None
    key: Optional[str] = None
    enabled: bool = True
    reset_password_url: Optional[str] = None

    @classmethod
    def from_markup(cls, attrs: Mapping[str, str]) -> 'FormDescriptor':
        """
        Read a form from the attributes of its container element.

        The container is ``data-lr-container`` if set, otherwise the element's
        own ``id``.

        Raises
        ------
        :class:`.ValidationError`
            If ``data-lr-type`` is missing or unknown.

        """
        raw_type = attrs.get('data-lr-type') or ''
        try:
            form_type = FormType(raw_type)
        except ValueError as e:
            raise ValidationError(f'Unknown form type: {raw_type!r}',
                                  {'data-lr-type': raw_type}) from e
        enabled = str(attrs.get('data-lr-enabled', 'true')).lower()
        return cls(
            type=form_type,
            container=attrs.get('data-lr-container') or attrs.get('id'),
            key=attrs.get('data-lr-key'),
            enabled=enabled not in ('false', '0', ''),
            reset_password_url=attrs.get('data-lr-reset-password-url')
        )


class ProfileForm(Form):
    """The update-profile form."""

    firstName = StringField('First name', validators=[DataRequired()])
    lastName = StringField('Last name', validators=[DataRequired()])
    email = StringField('Email', validators=[DataRequired()])


class ChangePasswordForm(Form):
    """The change-password form."""

    currentPassword = PasswordField('Current password',
                                    validators=[DataRequired()])
    newPassword = PasswordField('New password', validators=[DataRequired()])
    confirmNewPassword = PasswordField('Confirm new password',
                                       validators=[DataRequired()])


def validate_required(form_class: type, data: Mapping[str, Any],
                      message: str) -> Form:
    """
    Check that none of a form's fields are blank.

    Returns
    -------
    :class:`wtforms.Form`
        The validated form.

    Raises
    ------
    :class:`.ValidationError`
        Listing each blank field with ``message``.

    """
    form = form_class(MultiDict(data))
    if not form.validate():
        raise ValidationError('Required fields missing',
                              {name: message for name in form.errors})
    return form
