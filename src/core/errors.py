"""Helpers for inspecting botocore errors."""

from typing import Optional
from botocore.exceptions import ClientError


def error_code(error: BaseException) -> Optional[str]:
    """Get the AWS error code of an exception.

    Args:
        error: Any exception raised by a boto3 call

    Returns:
        Error code string for ClientError instances, None otherwise
    """
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def is_aws_error(error: BaseException, code: str, message: str = "") -> bool:
    """Check whether an exception is an AWS error with the given code.

    Args:
        error: Exception to inspect
        code: Expected AWS error code
        message: Optional substring the error message must contain

    Returns:
        True when the code matches and the message contains the substring
    """
    if error_code(error) != code:
        return False
    if not message:
        return True
    return message in error.response.get("Error", {}).get("Message", "")
