"""sysexits(3)-style exit codes."""

from ttrss_tool.exceptions import (
    AmbiguousPathError,
    AuthError,
    ConfigurationError,
    NotFoundError,
    ProtocolError,
    TransportError,
    TTRSSError,
)

EX_SUCCESS = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_UNAVAILABLE = 69
EX_SOFTWARE = 70
EX_PROTOCOL = 76
EX_NOPERM = 77
EX_CONFIG = 78


def exit_code_for(error: TTRSSError) -> int:
    """Map an exception to the exit code it should end the process with."""
    if isinstance(error, (NotFoundError, AmbiguousPathError)):
        return EX_DATAERR
    if isinstance(error, TransportError):
        return EX_UNAVAILABLE
    if isinstance(error, ProtocolError):
        return EX_PROTOCOL
    if isinstance(error, AuthError):
        return EX_NOPERM
    if isinstance(error, ConfigurationError):
        return EX_CONFIG
    return EX_SOFTWARE
