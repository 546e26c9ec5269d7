"""Schema-validated records stored inside a single column of a host record."""

import logging

from .records import (
    AttributeUndefined,
    CodecFailure,
    OperationNotSupported,
    TablelessError,
    TablelessHost,
    TablelessModel,
    attribute,
    has_tableless,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
