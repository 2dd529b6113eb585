import sqlite3
import pytest
from z2.api import Z2, create_note, create_note_from_file, read_body
from z2.conf import Z2Conf
from z2.errors import BodyUnreadable, PersistFailure, StoreUnavailable
from z2.models import Note, Tag
from z2.store import Store


def counts(store):
    return {table: store.connection.execute(f'SELECT COUNT(*) FROM {table}').fetchone()[0]
            for table in ['tags', 'notes', 'note_tags']}


@pytest.fixture
def store():
    with Store(':memory:') as s:
        yield s


def test_round_trip(store):
    note_id = create_note(store, 'Hello', 'A summary', ['go', 'notes'], 'Body text')
    assert store.note(note_id) == Note(id=note_id, title='Hello', summary='A summary', body='Body text',
                                       tags=[Tag('go', id=1), Tag('notes', id=2)])


def test_tags_are_shared(store):
    first = create_note(store, 'One', '', ['shared', 'a'], 'one')
    second = create_note(store, 'Two', '', ['b', 'shared'], 'two')
    third = create_note(store, 'Three', '', ['shared'], 'three')
    assert store.connection.execute("SELECT COUNT(*) FROM tags WHERE name = 'shared'").fetchone()[0] == 1
    assert counts(store) == {'tags': 3, 'notes': 3, 'note_tags': 5}
    shared_ids = {t.id for n in (first, second, third) for t in store.note(n).tags if t.name == 'shared'}
    assert shared_ids == {1}


def test_duplicate_tag_names(store):
    note_id = create_note(store, 'Dupes', 'Summary', ['x', 'x', 'y'], 'body')
    assert store.note(note_id).tag_names() == ['x', 'y']
    assert counts(store) == {'tags': 2, 'notes': 1, 'note_tags': 2}


def test_tag_names_are_exact(store):
    note_id = create_note(store, None, None, ['Work', 'work'], 'body')
    assert store.note(note_id).tag_names() == ['Work', 'work']


def test_no_tags(store):
    note_id = create_note(store, '', '', [], '')
    assert store.note(note_id) == Note(id=note_id, title='', summary='', body='')


def test_tag_names_iterable(store):
    note_id = create_note(store, 'Gen', None, (n for n in ['a', 'b']), 'body')
    assert store.note(note_id).tag_names() == ['a', 'b']


def test_failure_after_tag_resolution(store, monkeypatch):
    create_note(store, 'Before', None, ['old'], 'body')
    before = counts(store)

    def fail(note):
        raise sqlite3.IntegrityError('injected')

    monkeypatch.setattr(store, 'insert_note', fail)
    with pytest.raises(PersistFailure, match='injected'):
        create_note(store, 'After', None, ['old', 'new1', 'new2'], 'body')
    assert counts(store) == before
    assert store.connection.execute("SELECT name FROM tags").fetchall() == [('old',)]


def test_failure_on_invalid_tag(store):
    with pytest.raises(PersistFailure):
        create_note(store, 'Bad', None, ['fine', ''], 'body')
    assert counts(store) == {'tags': 0, 'notes': 0, 'note_tags': 0}


def test_closed_store():
    store = Store(':memory:')
    store.close()
    with pytest.raises(StoreUnavailable):
        create_note(store, 'Title', 'Summary', ['tag'], 'body')


def test_read_body(tmp_path):
    path = tmp_path / 'body.md'
    path.write_text('# Heading\n\nSome *markdown* ✓\n', encoding='utf-8')
    assert read_body(str(path)) == '# Heading\n\nSome *markdown* ✓\n'


def test_read_body_keeps_line_endings(tmp_path):
    path = tmp_path / 'body.md'
    path.write_bytes(b'line one\r\nline two\rend\n')
    assert read_body(str(path)) == 'line one\r\nline two\rend\n'


def test_read_body_missing(tmp_path):
    path = str(tmp_path / 'missing.md')
    with pytest.raises(BodyUnreadable, match='Cannot read body file') as excinfo:
        read_body(path)
    assert excinfo.value.path == path
    assert isinstance(excinfo.value.cause, FileNotFoundError)


def test_read_body_directory(tmp_path):
    with pytest.raises(BodyUnreadable):
        read_body(str(tmp_path))


def test_read_body_not_utf8(tmp_path):
    path = tmp_path / 'body.bin'
    path.write_bytes(b'\xff\xfe\x00garbage')
    with pytest.raises(BodyUnreadable) as excinfo:
        read_body(str(path))
    assert isinstance(excinfo.value.cause, UnicodeDecodeError)


def test_create_note_from_file(store, tmp_path):
    path = tmp_path / 'body.md'
    path.write_text('From a file')
    note_id = create_note_from_file(store, 'Title', 'Summary', ['file'], str(path))
    assert store.note(note_id).body == 'From a file'


def test_create_note_from_file_keeps_line_endings(store, tmp_path):
    path = tmp_path / 'body.md'
    path.write_bytes(b'line one\r\nline two\rend')
    note_id = create_note_from_file(store, 'Windows', None, [], str(path))
    assert store.note(note_id).body == 'line one\r\nline two\rend'


def test_create_note_from_missing_file(store, tmp_path):
    create_note(store, 'Existing', None, ['tag'], 'body')
    before = counts(store)
    with pytest.raises(BodyUnreadable):
        create_note_from_file(store, 'Title', 'Summary', ['tag', 'other'], str(tmp_path / 'missing.md'))
    assert counts(store) == before


def test_z2(tmp_path):
    db_path = str(tmp_path / 'notes.db')
    body_path = tmp_path / 'body.md'
    body_path.write_text('Body from file')
    with Z2Conf(db_path=db_path).instantiate() as z:
        first = z.create('Direct', None, ['a'], 'Body')
        second = z.create_from_file('File', 'Sum', ['a', 'b'], str(body_path))
    with Z2(Z2Conf(db_path=db_path)) as z:
        assert z.note(first) == Note(id=first, title='Direct', body='Body', tags=[Tag('a', id=1)])
        assert z.note(second) == Note(id=second, title='File', summary='Sum', body='Body from file',
                                      tags=[Tag('a', id=1), Tag('b', id=2)])


def test_z2_close_twice():
    z = Z2(Z2Conf(db_path=':memory:'))
    z.close()
    with pytest.raises(StoreUnavailable):
        z.close()


def test_for_user(tmp_path, monkeypatch):
    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.setenv('Z2_DB_FILE', str(tmp_path / 'env.db'))
    with Z2.for_user() as z:
        assert z.conf.db_path == str(tmp_path / 'env.db')
        z.create('Hi', None, [], 'there')
    assert (tmp_path / 'env.db').exists()
