"""
Standard exit codes for repomirror commands.

Following Unix/POSIX conventions for command-line tools.
"""
import sys
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors

# Application-specific exit codes (64-113 are typically available)
NO_REPOS_FOUND = 64      # No repositories matched, or none are cloned
GIT_ERROR = 65           # A git invocation failed
PERMISSION_ERROR = 67    # Insufficient permissions
DATA_ERROR = 70          # Invalid input (unknown category, bad path)
PARTIAL_SUCCESS = 71     # Some repositories synced, some failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'GitError': GIT_ERROR,
    'RepoNotClonedError': NO_REPOS_FOUND,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
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
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


def exit_with_code(code: int, message: Optional[str] = None):
    """Exit with a specific code and optional message on stderr."""
    if message:
        print(message, file=sys.stderr)
    sys.exit(code)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoReposFoundError(CommandError):
    """Raised when no repositories match, or a required one is not cloned."""
    def __init__(self, message: str = "No repositories found"):
        super().__init__(message, NO_REPOS_FOUND)



class PartialSuccessError(CommandError):
    """Raised when some repositories synced and some failed."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
