"""
Application-wide constants.
Centralizes magic numbers and configuration values.
"""

import string

# Booking references
BOOKING_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
BOOKING_REFERENCE_LENGTH = 6
DEFAULT_REFERENCE_MAX_ATTEMPTS = 100

# Query limits
BOOKINGS_DISPLAY_LIMIT = 100  # Maximum bookings returned by admin listing
REPORT_PAGE_SIZE = 1000  # PostgREST default max-rows

# Validation limits
MAX_CUSTOMER_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 1000
MIN_DATE_YEAR = 1900
MAX_DATE_YEAR = 2100

# PostgreSQL unique_violation, surfaced by PostgREST on duplicate inserts
UNIQUE_VIOLATION_CODE = "23505"
