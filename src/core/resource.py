"""Resource contract shared by all managed resource types.

A resource type implements create/read/update/delete handlers that operate
on a ``ResourceData`` instance: the id of the remote object plus the
attributes declared for it. Handlers clear the id when the remote object
no longer exists, which removes the instance from the local state.
"""

import copy
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from .aws_client import AWSClientManager
from .config import DEFAULT_RETRY_TIMEOUT_SECONDS


class ResourceValidationError(Exception):
    """Raised when resource attributes are invalid."""
    pass


class ResourceData:
    """Id and attributes of one resource instance."""

    def __init__(self, attributes: Optional[Dict[str, Any]] = None, resource_id: str = "") -> None:
        self._attributes: Dict[str, Any] = copy.deepcopy(attributes) if attributes else {}
        self._id = resource_id or ""

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: Optional[str]) -> None:
        """Set the remote object id; an empty id marks the instance as gone."""
        self._id = resource_id or ""

    def get(self, key: str, default: Any = None) -> Any:
        value = self._attributes.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        self._attributes[key] = value

    @property
    def attributes(self) -> Dict[str, Any]:
        return copy.deepcopy(self._attributes)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self._id, "attributes": self.attributes}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceData":
        return cls(data.get("attributes") or {}, data.get("id") or "")

    def __repr__(self) -> str:
        return f"ResourceData(id={self._id!r})"


class Resource(ABC):
    """Base class for all resource types."""

    #: Name used to declare the resource type in configuration
    type_name: str = ""

    def __init__(
        self,
        aws_client: AWSClientManager,
        retry_timeout: float = DEFAULT_RETRY_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize resource handler.

        Args:
            aws_client: Configured AWS client manager
            retry_timeout: Time budget in seconds for retried AWS calls
        """
        self.aws_client = aws_client
        self.retry_timeout = retry_timeout

    @property
    def supports_update(self) -> bool:
        """Whether changed arguments can be applied in place."""
        return True

    def requires_replace(self, old_args: Dict[str, Any], new_args: Dict[str, Any]) -> bool:
        """Whether changing the arguments needs a new remote object.

        Types without in-place updates are always replaced.
        """
        return not self.supports_update

    def has_drifted(self, args: Dict[str, Any], d: ResourceData) -> bool:
        """Whether a freshly read instance no longer matches its arguments."""
        return False

    def validate(self, attributes: Dict[str, Any]) -> None:
        """Check declared attributes before any AWS call.

        Raises:
            ResourceValidationError: When an attribute is invalid
        """
        pass

    @abstractmethod
    def create(self, d: ResourceData) -> None:
        pass

    @abstractmethod
    def read(self, d: ResourceData) -> None:
        pass

    def update(self, d: ResourceData) -> None:
        """Apply changed arguments in place.

        Never called for types whose ``supports_update`` is False: the
        provider replaces those instead.
        """
        raise NotImplementedError(f"{self.type_name} does not support in-place updates")

    @abstractmethod
    def delete(self, d: ResourceData) -> None:
        pass


def require_fields(item: Dict[str, Any], fields: Iterable[str], context: str) -> None:
    """Check that every field is present and not None.

    Raises:
        ResourceValidationError: When a field is missing
    """
    for field in fields:
        if item.get(field) is None:
            raise ResourceValidationError(f"{context}: '{field}' is required")


def validate_not_empty(value: Any, field: str) -> None:
    """Reject zero values (empty strings, empty collections, zero)."""
    if not value:
        raise ResourceValidationError(f"'{field}' must not be empty")


def validate_max_items(items: Any, maximum: int, field: str) -> None:
    if items is not None and len(items) > maximum:
        raise ResourceValidationError(
            f"'{field}' accepts at most {maximum} item(s), got {len(items)}"
        )


def validate_json_string(value: str, field: str) -> None:
    try:
        json.loads(value)
    except (TypeError, ValueError) as e:
        raise ResourceValidationError(f"'{field}' contains an invalid JSON: {e}")


ARN_PATTERN = re.compile(r"^arn:[\w-]+:[\w-]+:[\w-]*:(\d{12})?:.+$")


def validate_arn(value: str, field: str) -> None:
    if not isinstance(value, str) or not ARN_PATTERN.match(value):
        raise ResourceValidationError(f"'{field}' doesn't look like a valid ARN: {value!r}")


SFN_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]+$")


def validate_sfn_name(value: str, field: str) -> None:
    if not isinstance(value, str) or len(value) > 80:
        raise ResourceValidationError(f"'{field}' cannot be longer than 80 characters")
    if not SFN_NAME_PATTERN.match(value):
        raise ResourceValidationError(
            f"'{field}' must be composed with only these characters [a-zA-Z0-9-_]: {value!r}"
        )
