"""
Standard exit codes for batch-tool commands.

Following Unix/POSIX conventions for command-line tools.
"""

SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_REPOS_FOUND = 64      # No repositories matched the filters
API_ERROR = 65           # SCM provider call failed
CONFIG_ERROR = 66        # Configuration error (e.g. unknown provider)
CACHE_ERROR = 67         # Catalog cache could not be written or removed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

EXCEPTION_EXIT_CODES = {
    'ProviderFetchError': API_ERROR,
    'ProviderError': API_ERROR,
    'UnregisteredProvider': CONFIG_ERROR,
    'InvalidConfiguration': CONFIG_ERROR,
    'CacheWriteError': CACHE_ERROR,
    'PermissionError': CACHE_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoReposFoundError(CommandError):
    """Raised when no repositories match the given filters."""
    def __init__(self, message: str = "No repositories found"):
        super().__init__(message, NO_REPOS_FOUND)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)

