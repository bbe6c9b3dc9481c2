"""Origins of a CloudFront distribution.

The ``aws_cloudfront_origin`` resource adds origins to an existing
distribution. Origins are matched by ``origin_id`` (``Id`` in the API).
"""

from typing import Any, Dict, List

from src.core.resource import ResourceValidationError
from .base import DistributionSubResource
from .structure import expand_origins, flatten_origin, validate_origin


def origin_key(origin: Dict[str, Any]) -> str:
    return origin["Id"]


class CloudFrontOriginResource(DistributionSubResource):
    """Manages origins of an existing distribution."""

    type_name = "aws_cloudfront_origin"
    attribute = "origin"
    config_key = "Origins"
    key_attribute = "origin_id"

    key = staticmethod(origin_key)

    def expand(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        return expand_origins(items)

    def flatten(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return flatten_origin(item)

    def validate_item(self, item: Dict[str, Any]) -> None:
        validate_origin(item)

    def validate(self, attributes: Dict[str, Any]) -> None:
        super().validate(attributes)
        if not attributes.get(self.attribute):
            raise ResourceValidationError("'origin' requires at least one block")
