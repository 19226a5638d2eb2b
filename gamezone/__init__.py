"""
GameZone persistence and synchronisation package.

Layered the same way throughout:

  gamezone/repositories/  - pure I/O: an origin-scoped JSON key/value store,
                            its change broadcast, and one repository per key.
  gamezone/services/      - async business logic: identity, sessions,
                            favourites, reviews, and cross-context refresh.

Every "browsing context" (a tab, a CLI invocation, a worker) owns one
:class:`~gamezone.repositories.store.DurableStore`.  Contexts that share an
origin directory see each other's writes; the store's broadcast wakes the
other contexts so they can re-fetch.
"""

__version__ = '1.0.0'
