# Structured log event codes / client error codes
MISSING_IDENTIFIER = 'MISSING_IDENTIFIER'
LINK_NOT_FOUND = 'LINK_NOT_FOUND'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
