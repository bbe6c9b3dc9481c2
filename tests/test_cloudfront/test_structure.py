"""Unit tests for CloudFront attribute translation."""

import pytest

from src.cloudfront.structure import (
    expand_cache_behavior,
    expand_cache_behaviors,
    expand_origin,
    flatten_cache_behavior,
    flatten_origin,
    single,
    validate_cache_behavior,
    validate_origin,
)
from src.core.resource import ResourceValidationError


class TestSingle:

    def test_mapping_and_one_item_list(self):
        assert single({"a": 1}) == {"a": 1}
        assert single([{"a": 1}]) == {"a": 1}
        assert single([]) is None
        assert single(None) is None

    def test_rejects_more_than_one(self):
        with pytest.raises(ResourceValidationError, match="at most one block"):
            single([{"a": 1}, {"a": 2}])


class TestCacheBehaviorStructure:

    def test_expand_applies_defaults(self, behavior_args):
        cb = expand_cache_behavior(behavior_args)

        assert cb["PathPattern"] == "/api/*"
        assert cb["TargetOriginId"] == "origin-a"
        assert cb["MinTTL"] == 0
        assert cb["DefaultTTL"] == 86400
        assert cb["MaxTTL"] == 31536000
        assert cb["Compress"] is False
        assert cb["SmoothStreaming"] is False
        assert cb["FieldLevelEncryptionId"] == ""
        assert cb["TrustedSigners"] == {"Enabled": False, "Quantity": 0}
        assert cb["LambdaFunctionAssociations"] == {"Quantity": 0}
        assert cb["AllowedMethods"] == {
            "Quantity": 3,
            "Items": ["GET", "HEAD", "OPTIONS"],
            "CachedMethods": {"Quantity": 2, "Items": ["GET", "HEAD"]},
        }
        assert cb["ForwardedValues"] == {
            "QueryString": True,
            "Cookies": {"Forward": "none"},
            "Headers": {"Quantity": 0},
            "QueryStringCacheKeys": {"Quantity": 0},
        }

    def test_expand_nested_lists(self, behavior_args):
        behavior_args.update({
            "trusted_signers": ["self"],
            "default_ttl": 60,
            "lambda_function_association": [
                {"event_type": "viewer-request", "lambda_arn": "arn:aws:lambda:us-east-1:123456789012:function:f:1"},
            ],
            "forwarded_values": [{
                "query_string": False,
                "headers": ["Host"],
                "query_string_cache_keys": ["page"],
                "cookies": [{"forward": "whitelist", "whitelisted_names": ["session"]}],
            }],
        })

        cb = expand_cache_behavior(behavior_args)

        assert cb["DefaultTTL"] == 60
        assert cb["TrustedSigners"] == {"Enabled": True, "Quantity": 1, "Items": ["self"]}
        assert cb["LambdaFunctionAssociations"] == {
            "Quantity": 1,
            "Items": [{
                "EventType": "viewer-request",
                "LambdaFunctionARN": "arn:aws:lambda:us-east-1:123456789012:function:f:1",
                "IncludeBody": False,
            }],
        }
        assert cb["ForwardedValues"]["Headers"] == {"Quantity": 1, "Items": ["Host"]}
        assert cb["ForwardedValues"]["QueryStringCacheKeys"] == {"Quantity": 1, "Items": ["page"]}
        assert cb["ForwardedValues"]["Cookies"] == {
            "Forward": "whitelist",
            "WhitelistedNames": {"Quantity": 1, "Items": ["session"]},
        }

    def test_expand_cache_behaviors_container(self, behavior_args):
        container = expand_cache_behaviors([behavior_args])

        assert container["Quantity"] == 1
        assert container["Items"][0]["PathPattern"] == "/api/*"
        assert expand_cache_behaviors(None) == {"Quantity": 0, "Items": []}

    def test_flatten_reverses_expand(self, behavior_args):
        flat = flatten_cache_behavior(expand_cache_behavior(behavior_args))

        assert flat["path_pattern"] == "/api/*"
        assert flat["allowed_methods"] == ["GET", "HEAD", "OPTIONS"]
        assert flat["cached_methods"] == ["GET", "HEAD"]
        assert flat["forwarded_values"] == {
            "query_string": True,
            "cookies": {"forward": "none", "whitelisted_names": []},
            "headers": [],
            "query_string_cache_keys": [],
        }
        assert flat["trusted_signers"] == []
        assert flat["lambda_function_association"] == []
        assert flat["max_ttl"] == 31536000

    def test_validate_missing_required(self, behavior_args):
        del behavior_args["target_origin_id"]

        with pytest.raises(ResourceValidationError, match="'target_origin_id' is required"):
            validate_cache_behavior(behavior_args)

    def test_validate_missing_cookies(self, behavior_args):
        behavior_args["forwarded_values"] = {"query_string": True}

        with pytest.raises(ResourceValidationError, match="'cookies' is required"):
            validate_cache_behavior(behavior_args)

    def test_validate_too_many_lambda_associations(self, behavior_args):
        behavior_args["lambda_function_association"] = [
            {"event_type": f"event-{i}", "lambda_arn": "arn"} for i in range(5)
        ]

        with pytest.raises(ResourceValidationError, match="at most 4"):
            validate_cache_behavior(behavior_args)


class TestOriginStructure:

    def test_expand_custom_origin(self, origin_args):
        origin = expand_origin(origin_args)

        assert origin == {
            "Id": "api",
            "DomainName": "api.example.com",
            "OriginPath": "",
            "CustomHeaders": {"Quantity": 0},
            "CustomOriginConfig": {
                "HTTPPort": 80,
                "HTTPSPort": 443,
                "OriginProtocolPolicy": "https-only",
                "OriginSslProtocols": {"Quantity": 1, "Items": ["TLSv1.2"]},
                "OriginKeepaliveTimeout": 5,
                "OriginReadTimeout": 30,
            },
        }

    def test_expand_s3_origin_with_headers(self):
        origin = expand_origin({
            "origin_id": "assets",
            "domain_name": "assets.s3.amazonaws.com",
            "origin_path": "/v2",
            "custom_header": [{"name": "X-Env", "value": "prod"}],
            "s3_origin_config": {"origin_access_identity": "origin-access-identity/cloudfront/E1"},
        })

        assert origin["OriginPath"] == "/v2"
        assert origin["CustomHeaders"] == {
            "Quantity": 1,
            "Items": [{"HeaderName": "X-Env", "HeaderValue": "prod"}],
        }
        assert origin["S3OriginConfig"] == {
            "OriginAccessIdentity": "origin-access-identity/cloudfront/E1"
        }
        assert "CustomOriginConfig" not in origin

    def test_expand_without_origin_type_uses_empty_s3(self):
        origin = expand_origin({"origin_id": "o", "domain_name": "o.example.com"})

        assert origin["S3OriginConfig"] == {"OriginAccessIdentity": ""}

    def test_flatten_origin(self, origin_args, make_api_origin):
        flat = flatten_origin(expand_origin(origin_args))

        assert flat["origin_id"] == "api"
        assert flat["custom_origin_config"]["origin_ssl_protocols"] == ["TLSv1.2"]
        assert flat["custom_origin_config"]["origin_read_timeout"] == 30
        assert "s3_origin_config" not in flat

        s3_flat = flatten_origin(make_api_origin("bucket"))
        assert "s3_origin_config" not in s3_flat
        assert s3_flat["custom_header"] == []

    def test_validate_conflicting_origin_types(self, origin_args):
        origin_args["s3_origin_config"] = {"origin_access_identity": "x"}

        with pytest.raises(ResourceValidationError, match="conflicts with"):
            validate_origin(origin_args)

    def test_validate_empty_origin_id(self, origin_args):
        origin_args["origin_id"] = ""

        with pytest.raises(ResourceValidationError, match="'origin_id' must not be empty"):
            validate_origin(origin_args)

    def test_validate_incomplete_custom_origin(self, origin_args):
        del origin_args["custom_origin_config"]["https_port"]

        with pytest.raises(ResourceValidationError, match="'https_port' is required"):
            validate_origin(origin_args)
