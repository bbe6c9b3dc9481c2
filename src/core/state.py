"""Local state persistence for managed resource instances.

The state file is a JSON document mapping each resource address
(``<type>.<name>``) to its type, the arguments it was last applied with,
its remote id and its last read attributes.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .resource import ResourceData


logger = logging.getLogger(__name__)

STATE_VERSION = 1


class StateError(Exception):
    """Raised when the state file cannot be read or written."""
    pass


class StateStore:
    """JSON file backed store of resource instances."""

    def __init__(self, path: str) -> None:
        """Initialize state store.

        Args:
            path: Path of the state file; it is created on first save
        """
        self.path = Path(path)
        self._resources: Dict[str, Dict[str, Any]] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug(f"No state file at {self.path}, starting empty")
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            raise StateError(f"Invalid JSON in state file {self.path}: {e}")
        except IOError as e:
            raise StateError(f"Unable to read state file {self.path}: {e}")

        if data.get("version") != STATE_VERSION:
            raise StateError(
                f"Unsupported state file version {data.get('version')!r} in {self.path}"
            )
        self._resources = data.get("resources", {})

    def save(self) -> None:
        """Write the state file atomically."""
        data = {"version": STATE_VERSION, "resources": self._resources}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True, default=str)
            os.replace(tmp_path, self.path)
        except IOError as e:
            raise StateError(f"Unable to write state file {self.path}: {e}")

    def addresses(self) -> List[str]:
        return list(self._resources)

    def get(self, address: str) -> Optional[Dict[str, Any]]:
        """Get the stored entry for an address.

        Returns:
            Dict with 'type', 'args' and 'data' keys, or None
        """
        return self._resources.get(address)

    def get_data(self, address: str) -> Optional[ResourceData]:
        entry = self._resources.get(address)
        if entry is None:
            return None
        return ResourceData.from_dict(entry["data"])

    def put(self, address: str, type_name: str, args: Dict[str, Any], data: ResourceData) -> None:
        """Store an instance, or drop it when its id has been cleared."""
        if not data.id:
            self.remove(address)
            return
        self._resources[address] = {
            "type": type_name,
            "args": args,
            "data": data.to_dict(),
        }

    def remove(self, address: str) -> None:
        self._resources.pop(address, None)
