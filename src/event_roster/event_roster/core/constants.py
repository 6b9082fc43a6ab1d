"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PREVIEW_ROWS = 5
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

IDENTIFIER_HEADER = "id"

# Media types browsers and spreadsheet tools send for .csv uploads.
CSV_MEDIA_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "text/plain",
        "application/vnd.ms-excel",
    }
)
GENERIC_MEDIA_TYPES = frozenset({"", "application/octet-stream"})

PLACEHOLDER_AVATAR_URL = "https://placehold.co/100x100.png?text="

# Width of the id column in participants/staff_members.
MAX_IDENTIFIER_LENGTH = 64
