"""Read-modify-write access to CloudFront distribution configurations.

Sub-resources of a distribution (cache behaviors, origins) have no API of
their own: they are changed by fetching the whole DistributionConfig,
editing one of its lists and writing the config back guarded by the
ETag that came with it.
"""

import logging
from typing import Any, Callable, Dict, List, Tuple
from botocore.exceptions import ClientError

from src.core.aws_client import AWSClientManager
from src.core.config import DEFAULT_RETRY_TIMEOUT_SECONDS
from src.core.errors import is_aws_error
from src.core.retry import NonRetryableError, RetryableError, RetryTimeoutError, retry


logger = logging.getLogger(__name__)

NO_SUCH_DISTRIBUTION = "NoSuchDistribution"
INVALID_VIEWER_CERTIFICATE = "InvalidViewerCertificate"


class CloudFrontError(Exception):
    """Base exception for CloudFront operations."""
    pass


class DistributionNotFoundError(CloudFrontError):
    """Raised when the parent distribution does not exist."""

    def __init__(self, distribution_id: str) -> None:
        super().__init__(f"No Distribution found: {distribution_id}")
        self.distribution_id = distribution_id


class DistributionUpdateError(CloudFrontError):
    """Raised when a distribution config cannot be written back."""

    def __init__(self, distribution_id: str, error: BaseException) -> None:
        super().__init__(f"CloudFront Distribution {distribution_id} cannot be updated: {error}")
        self.distribution_id = distribution_id
        self.error = error


class DistributionConfigManager:
    """Fetches and writes back CloudFront distribution configurations."""

    def __init__(
        self,
        aws_client: AWSClientManager,
        retry_timeout: float = DEFAULT_RETRY_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize distribution config manager.

        Args:
            aws_client: Configured AWS client manager
            retry_timeout: Time budget in seconds for retried updates
        """
        self.aws_client = aws_client
        self.retry_timeout = retry_timeout
        self._cloudfront_client = None

    @property
    def cloudfront_client(self):
        """Get CloudFront client with lazy initialization."""
        if self._cloudfront_client is None:
            self._cloudfront_client = self.aws_client.get_client('cloudfront')
        return self._cloudfront_client

    def get_distribution_config(self, distribution_id: str) -> Tuple[Dict[str, Any], str]:
        """Fetch a distribution config and its ETag.

        Args:
            distribution_id: CloudFront distribution ID

        Returns:
            Tuple of (DistributionConfig, ETag)

        Raises:
            DistributionNotFoundError: When the distribution does not exist
            ClientError: For any other AWS error
        """
        try:
            response = self.cloudfront_client.get_distribution_config(Id=distribution_id)
        except ClientError as e:
            if is_aws_error(e, NO_SUCH_DISTRIBUTION):
                raise DistributionNotFoundError(distribution_id) from e
            raise

        return response['DistributionConfig'], response['ETag']

    def update_distribution(
        self,
        distribution_id: str,
        config: Dict[str, Any],
        etag: str,
        with_retry: bool = True,
    ) -> Dict[str, Any]:
        """Write a distribution config back, guarded by its ETag.

        With ``with_retry`` the call is repeated while CloudFront reports
        InvalidViewerCertificate, which happens while ACM and IAM
        certificates propagate. Every other error fails immediately.

        Args:
            distribution_id: CloudFront distribution ID
            config: Modified DistributionConfig
            etag: ETag returned with the config
            with_retry: Whether to retry on certificate propagation errors

        Returns:
            UpdateDistribution response

        Raises:
            DistributionUpdateError: When the update fails
        """
        def _update() -> Dict[str, Any]:
            try:
                return self.cloudfront_client.update_distribution(
                    Id=distribution_id,
                    DistributionConfig=config,
                    IfMatch=etag,
                )
            except ClientError as e:
                if with_retry and is_aws_error(e, INVALID_VIEWER_CERTIFICATE):
                    raise RetryableError(e)
                raise NonRetryableError(e)

        try:
            response = retry(_update, self.retry_timeout)
        except (ClientError, RetryTimeoutError) as e:
            raise DistributionUpdateError(distribution_id, e) from e

        logger.info(f"CloudFront Distribution {distribution_id} updated")
        return response


# List helpers shared by the sub-resources. Each operates on a CloudFront
# list container ({'Quantity': n, 'Items': [...]}) in place and keeps
# Quantity equal to the number of items.

def _items(container: Dict[str, Any]) -> List[Dict[str, Any]]:
    return list(container.get('Items') or [])


def _set_items(container: Dict[str, Any], items: List[Dict[str, Any]]) -> None:
    container['Items'] = items
    container['Quantity'] = len(items)


def add_items(new_items: List[Dict[str, Any]], container: Dict[str, Any]) -> None:
    """Append items to the end of a list container."""
    _set_items(container, _items(container) + list(new_items))


def replace_items(
    new_items: List[Dict[str, Any]],
    container: Dict[str, Any],
    key: Callable[[Dict[str, Any]], Any],
) -> None:
    """Replace items whose key matches a new item, keeping their position."""
    replacements = {key(item): item for item in new_items}
    _set_items(
        container,
        [replacements.get(key(item), item) for item in _items(container)],
    )


def merge_items(
    new_items: List[Dict[str, Any]],
    container: Dict[str, Any],
    key: Callable[[Dict[str, Any]], Any],
) -> None:
    """Replace items whose key matches a new item and append the others."""
    replace_items(new_items, container, key)
    present = {key(item) for item in _items(container)}
    add_items([item for item in new_items if key(item) not in present], container)


def remove_items(
    old_items: List[Dict[str, Any]],
    container: Dict[str, Any],
    key: Callable[[Dict[str, Any]], Any],
) -> None:
    """Drop items whose key matches one of the given items."""
    keys = {key(item) for item in old_items}
    _set_items(
        container,
        [item for item in _items(container) if key(item) not in keys],
    )


def match_items(
    declared: List[Dict[str, Any]],
    container: Dict[str, Any],
    key: Callable[[Dict[str, Any]], Any],
) -> List[Dict[str, Any]]:
    """Find the remote items matching declared ones, in declared order."""
    matched = []
    remote = _items(container)
    for item in declared:
        for remote_item in remote:
            if key(remote_item) == key(item):
                matched.append(remote_item)
    return matched
