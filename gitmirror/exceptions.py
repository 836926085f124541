class GitMirrorError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:gitmirror_error'


class InvalidURLError(GitMirrorError):
    """Base exception for user-supplied URLs the gateway refuses to handle."""

    error_code = 'url:invalid_url_error'


class MalformedURLError(InvalidURLError):
    """Raised when a URL cannot be parsed into an absolute URL with a host."""

    error_code = 'url:malformed_url_error'


class HostNotAllowedError(InvalidURLError):
    """Raised when a URL points outside the host allow-list."""

    error_code = 'url:host_not_allowed_error'


class UpstreamUnreachableError(GitMirrorError):
    """Raised when an upstream file host can't be reached or answers with an error."""

    error_code = 'upstream:unreachable_error'


class ConfigurationError(GitMirrorError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(GitMirrorError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class AppConfigError(InfrastructureError):
    """Raised when AppConfig responds with erroneous data."""

    error_code = 'infra:appconfig_error'
