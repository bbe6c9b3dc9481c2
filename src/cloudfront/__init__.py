"""CloudFront distribution sub-resources.

This package manages ordered cache behaviors and origins of existing
CloudFront distributions through read-modify-write updates of the
distribution configuration.
"""

from src.cloudfront.behavior import CloudFrontBehaviorResource
from src.cloudfront.origin import CloudFrontOriginResource

__all__ = ['CloudFrontBehaviorResource', 'CloudFrontOriginResource']
