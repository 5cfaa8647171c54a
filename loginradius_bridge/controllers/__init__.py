"""
Request controllers for the LoginRadius bridge.

Controllers take request data and return a ``(data, status_code, headers)``
tuple. Customer-facing failures are returned as structured JSON rather than
raised, so the widgets can show a message.
"""
