"""Provides the :class:`Store` class, which owns the SQLite database notes are saved in."""

from contextlib import contextmanager
import logging
import sqlite3
from typing import Iterator, Optional
from z2.errors import PersistFailure, StoreUnavailable
from z2.models import Note, Tag


logger = logging.getLogger(__name__)


_SQL_CREATE_SCHEMA = """
CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    CHECK (name <> '')
);

CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY,
    title TEXT,
    summary TEXT,
    body TEXT
);

CREATE TABLE IF NOT EXISTS note_tags (
    note_id INTEGER NOT NULL,
    tag_id INTEGER NOT NULL,
    PRIMARY KEY (note_id, tag_id),
    FOREIGN KEY(note_id) REFERENCES notes(id),
    FOREIGN KEY(tag_id) REFERENCES tags(id)
);

CREATE INDEX IF NOT EXISTS note_tags_index_tag_id ON note_tags (tag_id);
"""

_SQL_SELECT_TAG = 'SELECT id FROM tags WHERE name = ?'
_SQL_INSERT_TAG = 'INSERT INTO tags (name) VALUES (?)'
_SQL_INSERT_NOTE = 'INSERT INTO notes (title, summary, body) VALUES (?, ?, ?)'
_SQL_INSERT_NOTE_TAG = 'INSERT INTO note_tags (note_id, tag_id) VALUES (?, ?)'
_SQL_SELECT_NOTE = 'SELECT id, title, summary, body FROM notes WHERE id = ?'
_SQL_SELECT_NOTE_TAGS = ('SELECT tags.id, tags.name'
                         ' FROM tags'
                         '  INNER JOIN note_tags ON tags.id = note_tags.tag_id'
                         ' WHERE note_tags.note_id = ?'
                         ' ORDER BY tags.name')


class Store:
    """Saves notes and tags in a SQLite database file.

    Creating an instance opens (or creates) the database and makes sure the tables exist, so it is safe to create
    one every time the program starts. Raises :exc:`z2.errors.StoreUnavailable` if the database cannot be opened.

    Writes should happen inside :meth:`transaction`. Remember to call :meth:`close` when done with the instance,
    or use the instance as a context manager.

    .. attribute:: path
       :type: str

       Path of the database file, or ``:memory:``.
    """
    def __init__(self, path: str):
        self.path = path
        self.connection = None
        self._connect()

    def _connect(self) -> None:
        try:
            # transactions are started explicitly by transaction()
            connection = sqlite3.connect(self.path, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailable(f'Cannot open database {self.path}: {e}', e) from e
        try:
            connection.execute('PRAGMA foreign_keys = ON')
            connection.executescript(_SQL_CREATE_SCHEMA)
        except sqlite3.Error as e:
            connection.close()
            raise StoreUnavailable(f'Cannot initialize database {self.path}: {e}', e) from e
        self.connection = connection
        logger.debug('Opened database %s', self.path)

    def _connected(self) -> sqlite3.Connection:
        if self.connection is None:
            raise StoreUnavailable(f'Database {self.path} is not open')
        return self.connection

    @contextmanager
    def transaction(self) -> Iterator['Store']:
        """Groups the writes made inside the ``with`` block into one unit of work.

        If the block completes, everything is committed. Otherwise everything is rolled back; a
        :exc:`sqlite3.Error` is re-raised as :exc:`z2.errors.PersistFailure`, and any other exception propagates
        as it is.
        """
        connection = self._connected()
        try:
            connection.execute('BEGIN')
        except sqlite3.Error as e:
            raise PersistFailure(f'Cannot start transaction: {e}', e) from e
        try:
            yield self
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise PersistFailure(f'Failed to save changes: {e}', e) from e
        except BaseException:
            connection.rollback()
            raise

    def find_or_create_tag(self, name: str) -> Tag:
        """Returns the tag with exactly the given name, inserting it first if it does not exist yet."""
        cursor = self._connected().cursor()
        cursor.execute(_SQL_SELECT_TAG, (name,))
        row = cursor.fetchone()
        if row:
            return Tag(name, id=row[0])
        cursor.execute(_SQL_INSERT_TAG, (name,))
        logger.debug('Created tag %r', name)
        return Tag(name, id=cursor.lastrowid)

    def insert_note(self, note: Note) -> int:
        """Inserts a new note along with its tag associations, and returns its id.

        Tags without an id are looked up (or created) by name first. A tag that appears more than once is only
        associated once. The note's :attr:`z2.models.Note.id` is set to the new id.
        """
        cursor = self._connected().cursor()
        tags = [t if t.id is not None else self.find_or_create_tag(t.name) for t in note.tags]
        cursor.execute(_SQL_INSERT_NOTE, (note.title, note.summary, note.body))
        note_id = cursor.lastrowid
        tag_ids = dict.fromkeys(t.id for t in tags)
        cursor.executemany(_SQL_INSERT_NOTE_TAG, ((note_id, tag_id) for tag_id in tag_ids))
        note.id = note_id
        note.tags = tags
        return note_id

    def note(self, note_id: int) -> Optional[Note]:
        """Reads back a saved note and its tags (sorted by name), or returns None if there is no such note."""
        cursor = self._connected().cursor()
        cursor.execute(_SQL_SELECT_NOTE, (note_id,))
        row = cursor.fetchone()
        if not row:
            return None
        cursor.execute(_SQL_SELECT_NOTE_TAGS, (note_id,))
        tags = [Tag(name, id=tag_id) for tag_id, name in cursor]
        return Note(id=row[0], title=row[1], summary=row[2], body=row[3], tags=tags)

    def close(self) -> None:
        """Closes the database. Raises :exc:`z2.errors.StoreUnavailable` if it was already closed."""
        connection = self._connected()
        self.connection = None
        try:
            connection.close()
        except sqlite3.Error as e:
            raise StoreUnavailable(f'Cannot close database {self.path}: {e}', e) from e
        logger.debug('Closed database %s', self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
