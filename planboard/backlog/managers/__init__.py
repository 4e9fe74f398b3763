"""State managers for the backlog.

Each manager owns one in-memory collection loaded from a ``KeyValueStore``
and writes the whole collection back after every mutation.  Managers raise
domain exceptions (``LookupError``, ``ValueError``), never HTTP exceptions --
that translation is the router's responsibility.
"""
