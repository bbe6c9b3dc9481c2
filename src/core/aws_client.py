"""Centralized AWS client management with session handling.

This module provides a single place to build and cache the boto3 clients
used by the resource handlers (CloudFront, Step Functions, STS) while
sharing one session and one set of credentials.
"""

from typing import Dict, Optional
import boto3
from botocore.exceptions import (
    NoCredentialsError,
    ClientError,
    ProfileNotFound,
)


DEFAULT_REGION = "us-east-1"


class AWSCredentialsError(Exception):
    """Raised when AWS rejects the configured credentials."""
    pass


class AWSClientManager:
    """Centralized AWS client management with session handling.

    Clients are cached per service and region so every handler of a run
    talks to AWS through the same session.
    """

    def __init__(
        self,
        profile_name: Optional[str] = None,
        region_name: Optional[str] = None,
        validate: bool = True,
    ) -> None:
        """Initialize AWS client manager.

        Args:
            profile_name: Optional AWS profile name for credentials
            region_name: Optional default region for new clients
            validate: Whether to check credentials with STS up front

        Raises:
            NoCredentialsError: When AWS credentials are not available
            AWSCredentialsError: When AWS rejects the credentials
            ProfileNotFound: When specified profile doesn't exist
        """
        self._session: Optional[boto3.Session] = None
        self._clients: Dict[str, boto3.client] = {}
        self._profile_name = profile_name
        self._region_name = region_name
        if validate:
            self._validate_credentials()

    def _validate_credentials(self) -> None:
        """Validate AWS credentials are available and working.

        Raises:
            NoCredentialsError: When AWS credentials are not available
            AWSCredentialsError: When AWS rejects the credentials
            ProfileNotFound: When specified profile doesn't exist
        """
        try:
            session = self._get_session()
            sts_client = session.client("sts", region_name=self.get_current_region())
            sts_client.get_caller_identity()
        except NoCredentialsError:
            raise NoCredentialsError()
        except ProfileNotFound:
            raise ProfileNotFound(profile=self._profile_name)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("InvalidClientTokenId", "ExpiredToken"):
                raise AWSCredentialsError(
                    "AWS credentials are invalid or expired. "
                    "Please update your credentials."
                ) from e
            raise

    def _get_session(self) -> boto3.Session:
        """Get or create boto3 session.

        Returns:
            Configured boto3 session
        """
        if self._session is None:
            if self._profile_name:
                self._session = boto3.Session(profile_name=self._profile_name)
            else:
                self._session = boto3.Session()
        return self._session

    def get_client(self, service_name: str, region_name: Optional[str] = None) -> boto3.client:
        """Get AWS service client for specified region.

        Args:
            service_name: AWS service name (e.g., 'cloudfront', 'stepfunctions')
            region_name: AWS region name, defaults to the current region

        Returns:
            Configured boto3 client for the service and region
        """
        region_name = region_name or self.get_current_region()
        client_key = f"{service_name}_{region_name}"

        if client_key not in self._clients:
            session = self._get_session()
            self._clients[client_key] = session.client(
                service_name, region_name=region_name
            )

        return self._clients[client_key]

    def get_current_region(self) -> str:
        """Get the region new clients are created in.

        Returns:
            Explicit region, else the session region, else us-east-1
        """
        if self._region_name:
            return self._region_name
        session = self._get_session()
        return session.region_name or DEFAULT_REGION
