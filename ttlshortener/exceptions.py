class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortener_error'


class InvalidInputError(ShortenerError):
    """Raised when a target URL or TTL supplied by the caller is invalid."""

    error_code = 'app:invalid_input'


class NotFoundError(ShortenerError):
    """Raised when an identifier doesn't exist or its link has expired."""

    error_code = 'app:not_found'


class ResourceExhaustedError(ShortenerError):
    """Raised when no free identifier could be allocated within the retry ceiling."""

    error_code = 'app:resource_exhausted'


class ConfigurationError(ShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
