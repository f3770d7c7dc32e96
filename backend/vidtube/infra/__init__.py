"""
vidtube.infra
=============

Concrete adapters behind the service-layer ports.

- :mod:`jwt`: PyJWT-backed :class:`~vidtube.services._shared.ports.TokenCodec`.
- :mod:`sqlalchemy`: relational refresh-token store and principal directory.
- :mod:`redis`: key-value refresh-token store.
"""
