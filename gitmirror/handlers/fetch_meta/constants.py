# Structured log event codes
MISSING_URL = 'MISSING_URL'
METADATA_UNAVAILABLE = 'METADATA_UNAVAILABLE'
METADATA_SUCCESS = 'METADATA_SUCCESS'
