# Structured log event codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_URL = 'MISSING_URL'
INVALID_URL = 'INVALID_URL'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
