"""
Repository package for data access layers.

- `content`: the `ContentStoreProtocol` consumed by the expiry engine, the
  `ContentQuery` filter and an in-memory store.
- `sqlalchemy_content`: the PostgreSQL implementation over the ORM models.
"""
