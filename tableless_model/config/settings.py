"""
Configuration settings for tableless models.
"""

# ----------------------------------------------------------------------
# Attribute Declarations
# ----------------------------------------------------------------------
DEFAULT_ATTRIBUTE_TYPE = "string"  # Type used when an attribute declares none
PREDICATE_SUFFIX = "?"  # ``getattr(record, "flag?")`` reads ``flag`` as a bool

# ----------------------------------------------------------------------
# Display & Temporal Parsing
# ----------------------------------------------------------------------
DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z"

# Tried in order after ISO-8601 parsing fails
DATETIME_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S %Z",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%d %b %Y %H:%M:%S",
    "%d %b %Y %H:%M",
    "%d %b %Y",
    "%b %d %Y",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M%z",
    "%Y%m%dT%H%M%S",
    "%Y%m%dT%H%M",
)

# Numbers whose integer part has more digits than this cast to 0
MAX_INTEGER_DIGITS = 4300

# ----------------------------------------------------------------------
# Security Settings
# ----------------------------------------------------------------------
AES_GCM_KEY_SIZE = 32  # 256-bit key
AES_GCM_NONCE_SIZE = 12
PBKDF2_ITERATIONS = 100_000
KEY_DERIVATION_SALT = b"tableless-model/column-encryption"
