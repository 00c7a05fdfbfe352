"""
Favorites persistence.

Responsibilities:
- Define the ``favorites`` table and the ``Favorite`` read model.
- Open the database configured by ``DATABASE_URL``; fail loudly when it is unreachable.
- Provide list / add / delete / exists operations keyed by (user, place).
"""
