# Structured log event codes / client error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_TARGET_URL = 'MISSING_TARGET_URL'
INVALID_INPUT = 'INVALID_INPUT'
LINK_CREATED = 'LINK_CREATED'
