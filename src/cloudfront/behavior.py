"""Ordered cache behaviors of a CloudFront distribution.

The ``aws_cloudfront_behavior`` resource adds a set of ordered cache
behaviors to an existing distribution and keeps them in sync. Behaviors
are matched against the distribution by ``path_pattern``; behaviors the
resource does not declare are left untouched.
"""

from typing import Any, Dict, List

from .base import DistributionSubResource
from .structure import (
    expand_cache_behaviors,
    flatten_cache_behavior,
    validate_cache_behavior,
)


def behavior_key(behavior: Dict[str, Any]) -> str:
    return behavior["PathPattern"]


class CloudFrontBehaviorResource(DistributionSubResource):
    """Manages ordered cache behaviors of an existing distribution."""

    type_name = "aws_cloudfront_behavior"
    attribute = "ordered_cache_behavior"
    config_key = "CacheBehaviors"
    key_attribute = "path_pattern"

    key = staticmethod(behavior_key)

    def expand(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        return expand_cache_behaviors(items)

    def flatten(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return flatten_cache_behavior(item)

    def validate_item(self, item: Dict[str, Any]) -> None:
        validate_cache_behavior(item)
