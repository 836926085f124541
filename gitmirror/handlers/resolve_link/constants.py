# Structured log event codes
SHORT_LINK_NOT_FOUND = 'SHORT_LINK_NOT_FOUND'
TARGET_NOT_ALLOWED = 'TARGET_NOT_ALLOWED'
RESOLVE_SUCCESS = 'RESOLVE_SUCCESS'
