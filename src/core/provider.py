"""Resource registry and apply loop.

The provider maps resource type names to their handlers and drives them
from a list of declared resources and the local state:

* declared and unknown to the state: create
* declared and known, arguments changed: update, or delete then create
  when the type cannot be updated in place or the change needs a new
  remote object
* declared and known, arguments unchanged: read, then update when the
  remote object no longer matches the declaration
* known to the state but no longer declared: delete

The state is saved after every resource, so a failure part-way through a
run leaves it consistent with the handlers that did succeed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from .aws_client import AWSClientManager
from .config import DEFAULT_RETRY_TIMEOUT_SECONDS
from .resource import Resource, ResourceData
from .state import StateStore


logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised for unknown resource types or invalid declarations."""
    pass


class Action(Enum):
    """Handler invoked for a resource instance."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass
class PlannedChange:
    """One step of an apply run."""

    address: str
    type_name: str
    action: Action
    args: Dict[str, Any]


@dataclass
class ChangeResult:
    """Outcome of one step."""

    address: str
    action: Action
    resource_id: str
    attributes: Optional[Dict[str, Any]] = None

    @property
    def gone(self) -> bool:
        """Whether the instance has no remote object after the step."""
        return not self.resource_id


def default_resource_types() -> Dict[str, Type[Resource]]:
    from src.cloudfront.behavior import CloudFrontBehaviorResource
    from src.cloudfront.origin import CloudFrontOriginResource
    from src.stepfunctions.execution import SfnExecutionResource

    return {
        cls.type_name: cls
        for cls in (CloudFrontBehaviorResource, CloudFrontOriginResource, SfnExecutionResource)
    }


def resource_address(type_name: str, name: str) -> str:
    return f"{type_name}.{name}"


class Provider:
    """Drives resource handlers from declarations and local state."""

    def __init__(
        self,
        aws_client: AWSClientManager,
        state: StateStore,
        retry_timeout: float = DEFAULT_RETRY_TIMEOUT_SECONDS,
        resource_types: Optional[Dict[str, Type[Resource]]] = None,
    ) -> None:
        """Initialize provider.

        Args:
            aws_client: Configured AWS client manager
            state: Local state store
            retry_timeout: Time budget in seconds for retried AWS calls
            resource_types: Type name to handler class mapping
        """
        self.aws_client = aws_client
        self.state = state
        self.retry_timeout = retry_timeout
        self.resource_types = resource_types or default_resource_types()
        self._handlers: Dict[str, Resource] = {}

    def get_resource(self, type_name: str) -> Resource:
        """Get the handler for a resource type.

        Raises:
            ProviderError: When the type is not registered
        """
        if type_name not in self.resource_types:
            raise ProviderError(
                f"Unknown resource type '{type_name}'. "
                f"Supported types: {', '.join(sorted(self.resource_types))}"
            )
        if type_name not in self._handlers:
            self._handlers[type_name] = self.resource_types[type_name](
                self.aws_client, self.retry_timeout
            )
        return self._handlers[type_name]

    def validate(self, declared: List[Dict[str, Any]]) -> None:
        """Validate every declaration without calling AWS.

        Raises:
            ProviderError: When a type is unknown or an address is duplicated
            ResourceValidationError: When attributes are invalid
        """
        seen = set()
        for resource in declared:
            address = resource_address(resource["type"], resource["name"])
            if address in seen:
                raise ProviderError(f"Duplicate resource address: {address}")
            seen.add(address)
            self.get_resource(resource["type"]).validate(resource.get("args") or {})

    def plan(self, declared: List[Dict[str, Any]]) -> List[PlannedChange]:
        """Compute the steps an apply run takes."""
        self.validate(declared)
        changes = []
        declared_addresses = set()

        for resource in declared:
            type_name = resource["type"]
            args = resource.get("args") or {}
            address = resource_address(type_name, resource["name"])
            declared_addresses.add(address)
            entry = self.state.get(address)

            if entry is None:
                action = Action.CREATE
            elif entry["args"] == args:
                action = Action.READ
            elif self.get_resource(type_name).requires_replace(entry["args"], args):
                action = Action.REPLACE
            else:
                action = Action.UPDATE
            changes.append(PlannedChange(address, type_name, action, args))

        for address in self.state.addresses():
            if address not in declared_addresses:
                entry = self.state.get(address)
                changes.append(PlannedChange(address, entry["type"], Action.DELETE, entry["args"]))

        return changes

    def apply(self, declared: List[Dict[str, Any]]) -> List[ChangeResult]:
        """Bring the remote objects in line with the declarations."""
        results = []
        for change in self.plan(declared):
            logger.info(f"{change.address}: {change.action.value}")
            results.append(self._apply_change(change))
        return results

    def refresh(self) -> List[ChangeResult]:
        """Re-read every instance in the state."""
        results = []
        for address in self.state.addresses():
            entry = self.state.get(address)
            handler = self.get_resource(entry["type"])
            d = self._resource_data(address, entry["args"])
            handler.read(d)
            self._store(address, entry["type"], entry["args"], d)
            results.append(ChangeResult(address, Action.READ, d.id, d.attributes))
        return results

    def destroy(self) -> List[ChangeResult]:
        """Delete every instance in the state."""
        results = []
        for address in self.state.addresses():
            entry = self.state.get(address)
            change = PlannedChange(address, entry["type"], Action.DELETE, entry["args"])
            results.append(self._apply_change(change))
        return results

    def _apply_change(self, change: PlannedChange) -> ChangeResult:
        if change.action == Action.DELETE:
            entry = self.state.get(change.address)
            handler = self.get_resource(entry["type"])
            d = self._resource_data(change.address, entry["args"])
            handler.delete(d)
            self.state.remove(change.address)
            self.state.save()
            return ChangeResult(change.address, change.action, d.id)

        handler = self.get_resource(change.type_name)
        action = change.action

        if change.action == Action.REPLACE:
            entry = self.state.get(change.address)
            old = self._resource_data(change.address, entry["args"])
            self.get_resource(entry["type"]).delete(old)
            self.state.remove(change.address)
            self.state.save()
            d = ResourceData(change.args)
            handler.create(d)
        elif change.action == Action.CREATE:
            d = ResourceData(change.args)
            handler.create(d)
        elif change.action == Action.UPDATE:
            d = self._resource_data(change.address, change.args)
            handler.update(d)
        else:
            d = self._resource_data(change.address, change.args)
            handler.read(d)
            if d.id and handler.has_drifted(change.args, d):
                logger.warning(f"{change.address} no longer matches its declaration, updating it")
                action = Action.UPDATE
                d = self._resource_data(change.address, change.args)
                handler.update(d)

        self._store(change.address, change.type_name, change.args, d)
        return ChangeResult(change.address, action, d.id, d.attributes)

    def _resource_data(self, address: str, args: Dict[str, Any]) -> ResourceData:
        """Build handler input from stored attributes overlaid with arguments."""
        stored = self.state.get_data(address)
        if stored is None:
            return ResourceData(args)
        attributes = stored.attributes
        attributes.update(args)
        return ResourceData(attributes, stored.id)

    def _store(self, address: str, type_name: str, args: Dict[str, Any], d: ResourceData) -> None:
        if not d.id:
            logger.warning(f"{address} no longer exists, removing it from state")
        self.state.put(address, type_name, args, d)
        self.state.save()
