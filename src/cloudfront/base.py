"""Common CRUD flow for resources stored inside a distribution config.

Every handler follows the same sequence: fetch the parent
DistributionConfig with its ETag, locate the declared sub-items by key,
add, replace or remove them, write the config back with IfMatch and read
the result. Subclasses only describe which list they manage and how its
items translate to and from resource attributes.
"""

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional, Set, Tuple

from src.core.aws_client import AWSClientManager
from src.core.config import DEFAULT_RETRY_TIMEOUT_SECONDS
from src.core.resource import Resource, ResourceData, validate_not_empty
from .distribution import (
    DistributionConfigManager,
    DistributionNotFoundError,
    DistributionUpdateError,
    add_items,
    match_items,
    merge_items,
    remove_items,
)


logger = logging.getLogger(__name__)


class DistributionSubResource(Resource):
    """Base class for resources that live in a DistributionConfig list."""

    #: Resource attribute holding the declared items
    attribute: str = ""

    #: DistributionConfig key of the list container
    config_key: str = ""

    #: Item attribute the list is keyed by
    key_attribute: str = ""

    def __init__(
        self,
        aws_client: AWSClientManager,
        retry_timeout: float = DEFAULT_RETRY_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(aws_client, retry_timeout)
        self.distributions = DistributionConfigManager(aws_client, retry_timeout)

    @staticmethod
    @abstractmethod
    def key(item: Dict[str, Any]) -> Any:
        """Key identifying an API item within its list."""

    @abstractmethod
    def expand(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Translate declared items into an API list container."""

    @abstractmethod
    def flatten(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Translate one API item into resource attributes."""

    @abstractmethod
    def validate_item(self, item: Dict[str, Any]) -> None:
        pass

    def validate(self, attributes: Dict[str, Any]) -> None:
        validate_not_empty(attributes.get("distribution_id"), "distribution_id")
        for item in attributes.get(self.attribute) or []:
            self.validate_item(item)

    def _declared(self, d: ResourceData) -> List[Dict[str, Any]]:
        return self.expand(d.get(self.attribute, []))["Items"]

    def _declared_keys(self, args: Dict[str, Any]) -> Set[Any]:
        return {self.key(item) for item in self.expand(args.get(self.attribute) or [])["Items"]}

    def requires_replace(self, old_args: Dict[str, Any], new_args: Dict[str, Any]) -> bool:
        """Replace when the distribution or the set of item keys changes.

        Items dropped from the declaration are only removed by delete, so a
        changed key set goes through delete and create.
        """
        if old_args.get("distribution_id") != new_args.get("distribution_id"):
            return True
        return self._declared_keys(old_args) != self._declared_keys(new_args)

    def has_drifted(self, args: Dict[str, Any], d: ResourceData) -> bool:
        found = {item.get(self.key_attribute) for item in d.get(self.attribute, [])}
        return not self._declared_keys(args) <= found

    def _fetch(self, d: ResourceData, clear_on_missing: bool) -> Optional[Tuple[Dict[str, Any], str]]:
        try:
            return self.distributions.get_distribution_config(d.id)
        except DistributionNotFoundError:
            logger.warning(f"No Distribution found: {d.id}")
            if clear_on_missing:
                d.set_id("")
            return None

    def _container(self, config: Dict[str, Any]) -> Dict[str, Any]:
        return config.setdefault(self.config_key, {"Quantity": 0})

    def create(self, d: ResourceData) -> None:
        self.validate(d.attributes)
        d.set_id(d.get("distribution_id"))
        fetched = self._fetch(d, clear_on_missing=True)
        if fetched is None:
            return
        config, etag = fetched

        add_items(self._declared(d), self._container(config))

        try:
            self.distributions.update_distribution(d.id, config, etag, with_retry=False)
        except DistributionUpdateError:
            d.set_id("")
            raise

        self.read(d)

    def read(self, d: ResourceData) -> None:
        fetched = self._fetch(d, clear_on_missing=True)
        if fetched is None:
            return
        config, _ = fetched

        matched = match_items(self._declared(d), self._container(config), self.key)
        d.set(self.attribute, [self.flatten(item) for item in matched])

    def update(self, d: ResourceData) -> None:
        self.validate(d.attributes)
        d.set_id(d.get("distribution_id"))
        fetched = self._fetch(d, clear_on_missing=False)
        if fetched is None:
            return
        config, etag = fetched

        merge_items(self._declared(d), self._container(config), self.key)
        self.distributions.update_distribution(d.id, config, etag)

        self.read(d)

    def delete(self, d: ResourceData) -> None:
        d.set_id(d.get("distribution_id"))
        fetched = self._fetch(d, clear_on_missing=False)
        if fetched is not None:
            config, etag = fetched
            remove_items(self._declared(d), self._container(config), self.key)
            self.distributions.update_distribution(d.id, config, etag)
            self.read(d)

        d.set_id("")
