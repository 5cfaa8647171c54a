"""Controllers for the storefront account pages."""

from http import HTTPStatus as status
from typing import Optional

from .. import logging
from ..exceptions import ConfigurationError, TransportError, Unavailable, \
    UnexpectedError
from ..services import customers, profiles
from .identity import ResponseData, unexpected_error

logger = logging.getLogger(__name__)


def editable_profile(customer_id: Optional[int]) -> ResponseData:
    """
    Get the values to prefill the update-profile form with.

    The values come from LoginRadius rather than the storefront, since that is
    the profile the form changes.

    Parameters
    ----------
    customer_id : int or None
        The logged-in customer, if any.

    Returns
    -------
    dict
        ``FirstName``, ``LastName`` and ``Email``, or an error result.
    int
        401 if no customer is logged in, otherwise 200.
    dict
        Headers to add to the response.

    """
    if customer_id is None:
        return {'status': 'ERROR', 'message': 'Not logged in'}, \
            status.UNAUTHORIZED, {}
    try:
        customer = customers.get_customer(customer_id)
    except Unavailable as e:
        return unexpected_error(e), status.OK, {}
    if customer is None:
        return {'status': 'ERROR', 'message': 'Not logged in'}, \
            status.UNAUTHORIZED, {}
    try:
        data = profiles.get_editable_profile(customer.login)
    except (UnexpectedError, ConfigurationError, TransportError) as e:
        return unexpected_error(e), status.OK, {}
    return data, status.OK, {}
