"""Tableless record package.

Typed, schema-restricted records stored serialized in a single column
of a host record.  Host classes are mapped with :mod:`sqlalchemy`;
encrypted columns use the AES-GCM helpers from
:mod:`tableless_model.security.crypto`.
"""

from .codec import EncryptedCodec, PlainCodec, SerializedColumn, codec_for
from .errors import AttributeUndefined, CodecFailure, OperationNotSupported, TablelessError
from .host import TablelessColumn, TablelessHost, has_tableless
from .model import Attribute, TablelessModel, attribute, lookup_model
from .schema import MISSING, AttributeDefinition, AttributeSchema, DeferredDefault, LiteralDefault
