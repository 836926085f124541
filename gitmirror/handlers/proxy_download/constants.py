# Structured log event codes
INVALID_TARGET = 'INVALID_TARGET'
