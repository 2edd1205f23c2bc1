"""Common exceptions for all client modules."""


class ClientError(Exception):
    """Base exception for all client errors."""


class ClientConnectionError(ClientError):
    """Error when connection to a service fails."""


class ClientTimeoutError(ClientError):
    """Error when a call to the tracker does not finish in time."""


class CommandExecutionError(ClientError):
    """Error when an `az` command exits with a non-zero status."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        stdout: str,
        stderr: str,
        message: str = "az command failed",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.message = (
            f"{message} (exit {returncode}): {stderr.strip()}"
            if stderr
            else f"{message} (exit {returncode})"
        )
        super().__init__(self.message)


class JsonParseError(ClientError):
    """Error when parsing JSON output."""


class AuthenticationError(ClientError):
    """Error when authentication fails."""


class ResourceNotFoundError(ClientError):
    """Error when a resource is not found."""


class InvalidWorkItemError(ClientError):
    """Error when a work item lacks the fields needed to create it."""


class ApiError(ClientError):
    """General API error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize an API error with the HTTP status code, when known."""
        super().__init__(message)
        self.status_code = status_code
