"""Configuration for z2.

The database path is chosen, in order of precedence, from: the ``--db`` command-line argument, the ``Z2_DB_FILE``
environment variable, the ``conf`` variable in ``~/.z2.conf.py``, and finally ``z2.db`` in the current directory.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
import os
import os.path
from typing import Mapping
from z2.errors import ConfError


DB_FILE_ENV_VAR = 'Z2_DB_FILE'

DEFAULT_DB_FILE = 'z2.db'

MEMORY_DB = ':memory:'


def user_conf_path() -> str:
    return os.path.expanduser(os.path.join('~', '.z2.conf.py'))


@dataclass
class Z2Conf:
    db_path: str = DEFAULT_DB_FILE
    """Path where the SQLite database file is stored.

    The file will be created if it does not exist, but its parent directory must already exist.
    ``:memory:`` may be used for a throwaway database.
    """

    @classmethod
    def for_user(cls, environ: Mapping[str, str] = None) -> Z2Conf:
        """Builds the configuration from ``~/.z2.conf.py`` (if it exists) and the environment.

        The config file is optional. If it exists, it must assign an instance of :class:`Z2Conf` to the
        variable ``conf``, otherwise :exc:`z2.errors.ConfError` is raised.
        """
        environ = os.environ if environ is None else environ
        path = user_conf_path()
        if os.path.exists(path):
            with open(path, 'r') as file:
                conf_script = file.read()
            context = {}
            exec(conf_script, context)
            if 'conf' not in context or not isinstance(context['conf'], cls):
                raise ConfError('You need to assign an instance of Z2Conf to the variable `conf` '
                                f'in your config file: {path}')
            conf = context['conf']
        else:
            conf = cls()
        env_path = environ.get(DB_FILE_ENV_VAR)
        if env_path:
            conf = replace(conf, db_path=env_path)
        return conf

    def standardize(self) -> Z2Conf:
        if self.db_path == MEMORY_DB:
            return self
        return replace(self, db_path=os.path.expanduser(self.db_path))

    def instantiate(self):
        from z2.api import Z2
        return Z2(self.standardize())
