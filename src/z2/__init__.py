"""A minimal note-taking tool that stores notes and their tags in a SQLite database.

If you installed via ``pip``, run ``z2 -h`` to get help.

To use the Python API, look at :class:`z2.api.Z2`, or call :func:`z2.api.create_note` with a
:class:`z2.store.Store` of your own.
"""
