"""Fixtures shared by the CloudFront tests."""

import pytest


def api_behavior(path_pattern, target_origin_id="origin-a", **overrides):
    """Cache behavior as CloudFront returns it."""
    behavior = {
        "PathPattern": path_pattern,
        "TargetOriginId": target_origin_id,
        "TrustedSigners": {"Enabled": False, "Quantity": 0},
        "ViewerProtocolPolicy": "allow-all",
        "AllowedMethods": {
            "Quantity": 2,
            "Items": ["HEAD", "GET"],
            "CachedMethods": {"Quantity": 2, "Items": ["HEAD", "GET"]},
        },
        "SmoothStreaming": False,
        "Compress": False,
        "LambdaFunctionAssociations": {"Quantity": 0},
        "FieldLevelEncryptionId": "",
        "ForwardedValues": {
            "QueryString": False,
            "Cookies": {"Forward": "none"},
            "Headers": {"Quantity": 0},
            "QueryStringCacheKeys": {"Quantity": 0},
        },
        "MinTTL": 0,
        "DefaultTTL": 86400,
        "MaxTTL": 31536000,
    }
    behavior.update(overrides)
    return behavior


def api_origin(origin_id, domain_name=None):
    """Origin as CloudFront returns it."""
    return {
        "Id": origin_id,
        "DomainName": domain_name or f"{origin_id}.s3.amazonaws.com",
        "OriginPath": "",
        "CustomHeaders": {"Quantity": 0},
        "S3OriginConfig": {"OriginAccessIdentity": ""},
    }


@pytest.fixture
def distribution_config():
    """DistributionConfig with two origins and two ordered cache behaviors."""
    return {
        "CallerReference": "ref-1",
        "Comment": "",
        "Enabled": True,
        "Origins": {
            "Quantity": 2,
            "Items": [api_origin("origin-a"), api_origin("origin-b")],
        },
        "CacheBehaviors": {
            "Quantity": 2,
            "Items": [api_behavior("/static/*"), api_behavior("/img/*", "origin-b")],
        },
    }


@pytest.fixture
def behavior_args():
    """Declared attributes of one ordered cache behavior."""
    return {
        "path_pattern": "/api/*",
        "target_origin_id": "origin-a",
        "viewer_protocol_policy": "redirect-to-https",
        "allowed_methods": ["GET", "HEAD", "OPTIONS"],
        "cached_methods": ["GET", "HEAD"],
        "forwarded_values": {
            "query_string": True,
            "cookies": {"forward": "none"},
        },
    }


@pytest.fixture
def origin_args():
    """Declared attributes of one custom origin."""
    return {
        "origin_id": "api",
        "domain_name": "api.example.com",
        "custom_origin_config": {
            "http_port": 80,
            "https_port": 443,
            "origin_protocol_policy": "https-only",
            "origin_ssl_protocols": ["TLSv1.2"],
        },
    }


@pytest.fixture
def make_api_behavior():
    return api_behavior


@pytest.fixture
def make_api_origin():
    return api_origin
