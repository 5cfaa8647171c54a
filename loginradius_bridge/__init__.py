"""
LoginRadius storefront bridge.

Binds a storefront's customer accounts to the LoginRadius identity platform.
LoginRadius hosts the login, registration and password-management widgets and
is the authority on who a customer is; the storefront keeps its own customer
records for orders, carts and sessions. This package keeps the two in step.

Context
-------
A customer authenticates in a LoginRadius widget rendered in the browser. The
widget hands back an access token, which the browser posts to this service.
The service exchanges the token for the customer's LoginRadius profile,
refreshing the token once if LoginRadius reports that it has expired, and then
finds or creates the matching local customer (joined on the LoginRadius UID)
and logs them in. Profile edits made through the LoginRadius widgets are
pushed back into the local record through the same resolution path.

Layout
------
:mod:`.services.provider`
    HTTP transport to the LoginRadius REST API.
:mod:`.services.tokens`
    Access token refresh (mint a refresh token, exchange it).
:mod:`.services.profiles`
    Resolve an access token into a :class:`.domain.RemoteProfile`.
:mod:`.services.customers`
    Reconcile remote profiles with local customer records.
:mod:`.widgets`
    Browser-side orchestration of the LoginRadius widgets.
:mod:`.controllers`, :mod:`.routes`
    The server boundary that the widgets talk to.

"""
