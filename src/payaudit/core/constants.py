"""Application-wide constants."""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_FILENAME_LENGTH = 255
MAX_MIMETYPE_LENGTH = 100
MAX_REFERENCE_LENGTH = 100
MAX_ENUM_LENGTH = 50

# Payment notes
MAX_USER_NOTES_LENGTH = 500
MAX_ADMIN_NOTES_LENGTH = 1000

# Pagination defaults
MAX_PAGE_SIZE = 100
DEFAULT_AUDIT_PAGE_SIZE = 50

# Payment schedule
MIN_MONTH_NUMBER = 1
MAX_MONTH_NUMBER = 12

# Receipt numbers look like RCP-202610-3F9A1C
RECEIPT_PREFIX = "RCP"

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
