"""
Orchestration of the LoginRadius hosted widgets.

The widget library is a black box reachable only through a script-load and
callback contract. These modules model the page side of that contract: wait
for the library to load, build one widget per form on the page, and hand the
widget results to the server boundary. The library, the page, and the server
are injected, so the orchestration can run against fakes.
"""
