"""Command-line interface for z2."""


import argparse
from dataclasses import replace
import json
import logging
import sys
from typing import Iterable, List
from terminaltables import AsciiTable
from z2.api import Z2
from z2.conf import Z2Conf, DB_FILE_ENV_VAR, DEFAULT_DB_FILE
from z2.errors import Error
from z2.models import Note


def _split_tags(values: Iterable[str]) -> List[str]:
    return [t for v in values for t in v.split(',') if t]


def _print_note_table(note: Note) -> None:
    data = [('ID', 'Title', 'Summary', 'Tags'),
            (note.id, note.title or '', note.summary or '', '\n'.join(note.tag_names()))]
    table = AsciiTable(data)
    table.justify_columns[0] = 'right'
    print(table.table)


def _create(args, z: Z2) -> int:
    note_id = z.create_from_file(title=args.title[0] if args.title else None,
                                 summary=args.summary[0] if args.summary else None,
                                 tag_names=_split_tags(args.tags or []),
                                 body_path=args.body_file[0])
    if args.json:
        print(json.dumps(z.note(note_id).as_json()))
    elif args.table:
        _print_note_table(z.note(note_id))
    else:
        print(f'Note created successfully! ID: {note_id}')
    return 0


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='z2', description='z2 is a simple note-taking system.')
    parser.set_defaults(func=None)
    parser.add_argument('--db', nargs=1,
                        help=f'Database file. Defaults to the {DB_FILE_ENV_VAR} environment variable, then the '
                             f'db_path in ~/.z2.conf.py, then {DEFAULT_DB_FILE}. The file is created if it does '
                             'not exist.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log progress to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_c = subs.add_parser('create', help='Create a new note.')
    p_c.add_argument('-t', '--title', nargs=1, help='Title of the note.')
    p_c.add_argument('-s', '--summary', nargs=1, help='Summary of the note.')
    p_c.add_argument('-g', '--tags', action='append',
                     help='Comma-separated list of tags for the note. May be given more than once. '
                          'Tags that do not exist yet are created.')
    p_c.add_argument('-b', '--body-file', nargs=1, required=True,
                     help='Path to the Markdown file for the note body. The file must be UTF-8 text; it is '
                          'stored exactly as written.')
    p_c_formats = p_c.add_mutually_exclusive_group()
    p_c_formats.add_argument('-j', '--json', action='store_true', help='Output the saved note as JSON.')
    p_c_formats.add_argument('--table', action='store_true', help='Output the saved note as a table.')
    p_c.set_defaults(func=_create)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    if not args.func:
        parser.print_help()
        return 1
    try:
        conf = Z2Conf.for_user()
        if args.db:
            conf = replace(conf, db_path=args.db[0])
        with conf.instantiate() as z:
            return args.func(args, z)
    except Error as e:
        print(f'Error: {e.message}', file=sys.stderr)
        return 1
