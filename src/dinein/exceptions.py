"""Errors specific to the dine-in domain.

Validation and not-found failures use Protean's own exceptions
(``ValidationError``, ``ObjectNotFoundError``). Only the query time budget has
no Protean counterpart.
"""

from protean.exceptions import ProteanException


class QueryTimeoutError(ProteanException):
    """A storage query ran past its configured time budget. Safe to retry."""
