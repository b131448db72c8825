"""Exception classes raised by citystid.

Every failure that reaches the caller of a scan or a ledger write is one of
these. Lower-level exceptions are chained via ``raise ... from``.
"""


class CityStidError(Exception):
    """Base class for all citystid errors."""


class IoError(CityStidError):
    """A source, code-list or ledger file could not be opened, read or written."""


class ParseError(CityStidError):
    """Malformed markup, or a ledger whose content is not a JSON object."""


class FormatError(CityStidError, ValueError):
    """Geometry text that does not decompose into triples of floats."""
