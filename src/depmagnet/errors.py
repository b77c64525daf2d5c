"""Fatal error kinds and the exception that carries them to the CLI."""

from __future__ import annotations

from enum import IntEnum


class CommandError(IntEnum):
    """Error kinds; each value is the process exit code for that kind."""

    CONFIG_NOT_FOUND = 1
    CONFIG_NOT_DECODABLE = 2
    NO_DEPENDENCIES = 3
    DUPLICATE_DEPENDENCIES = 4
    NO_DEPENDENCY_QUALIFIER = 5
    FILE_ERROR = 6
    PACKAGE_RESOLUTION = 7
    INVALID_DATE = 8
    PATH_NOT_FOUND = 9
    INVALID_ARGUMENT = 10
    DUPLICATE_MODULE = 11
    IMPORT_CYCLE = 12


class DepMagnetError(Exception):
    """An unrecoverable error; the CLI prints the message and exits with ``kind``."""

    def __init__(self, kind: CommandError, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
