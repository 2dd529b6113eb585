"""Provides the note-creation workflow, and :class:`Z2`, the main entry point for using the library."""

from __future__ import annotations
import logging
from typing import Iterable, Optional
from z2.conf import Z2Conf
from z2.errors import BodyUnreadable
from z2.models import Note
from z2.store import Store


logger = logging.getLogger(__name__)


def read_body(path: str) -> str:
    """Reads the UTF-8 text of a note body from the given file, with line endings left as they are.

    Raises :exc:`z2.errors.BodyUnreadable` if the file is missing, unreadable, or not valid UTF-8.
    """
    try:
        with open(path, 'r', encoding='utf-8', newline='') as file:
            return file.read()
    except (OSError, UnicodeDecodeError) as e:
        raise BodyUnreadable(f'Cannot read body file {path}: {e}', path, e) from e


def create_note(store: Store, title: Optional[str], summary: Optional[str], tag_names: Iterable[str],
                body: Optional[str]) -> int:
    """Saves a new note and returns its id.

    Each distinct name in ``tag_names`` is resolved to an existing tag with exactly that name, or a new tag if
    there is none. Repeated names are only associated with the note once.

    The tags and the note are written in a single transaction: if anything fails, no new tags, note, or
    associations are left in the store, and :exc:`z2.errors.PersistFailure` is raised. Raises
    :exc:`z2.errors.StoreUnavailable` if the store has been closed.
    """
    names = list(dict.fromkeys(tag_names))
    with store.transaction():
        tags = [store.find_or_create_tag(name) for name in names]
        note_id = store.insert_note(Note(title=title, summary=summary, body=body, tags=tags))
    logger.info('Created note %d with tags %s', note_id, names)
    return note_id


def create_note_from_file(store: Store, title: Optional[str], summary: Optional[str], tag_names: Iterable[str],
                          body_path: str) -> int:
    """Like :func:`create_note`, but reads the body from a file first.

    If the file cannot be read, :exc:`z2.errors.BodyUnreadable` is raised and the store is not touched.
    """
    body = read_body(body_path)
    return create_note(store, title, summary, tag_names, body)


class Z2:
    """Main entry point for working programmatically with your notes.

    Generally, you should get an instance using the :meth:`Z2.for_user` method. Call :meth:`close` when you're
    done with it, or else use it as a context manager.

    .. attribute:: conf
       :type: z2.conf.Z2Conf

    .. attribute:: store
       :type: z2.store.Store

    Example:

    .. code-block:: python

       from z2.api import Z2
       with Z2.for_user() as z:
           note_id = z.create('Groceries', 'For the weekend', ['shopping'], 'eggs, milk')
    """

    @staticmethod
    def for_user() -> Z2:
        """Creates an instance using ``~/.z2.conf.py`` and the ``Z2_DB_FILE`` environment variable.

        See :meth:`z2.conf.Z2Conf.for_user`.
        """
        return Z2Conf.for_user().instantiate()

    def __init__(self, conf: Z2Conf):
        self.conf = conf
        self.store = Store(conf.db_path)

    def create(self, title: Optional[str], summary: Optional[str], tag_names: Iterable[str],
               body: Optional[str]) -> int:
        """See :func:`create_note`."""
        return create_note(self.store, title, summary, tag_names, body)

    def create_from_file(self, title: Optional[str], summary: Optional[str], tag_names: Iterable[str],
                         body_path: str) -> int:
        """See :func:`create_note_from_file`."""
        return create_note_from_file(self.store, title, summary, tag_names, body_path)

    def note(self, note_id: int) -> Optional[Note]:
        """Reads back a saved note. See :meth:`z2.store.Store.note`."""
        return self.store.note(note_id)

    def close(self) -> None:
        """Closes the underlying store."""
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
