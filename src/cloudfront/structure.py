"""Translation between resource attributes and CloudFront API structures.

``expand_*`` functions turn snake_case resource attributes into the
PascalCase shapes boto3 sends to CloudFront; ``flatten_*`` functions do
the reverse for values read back from a DistributionConfig. CloudFront
lists are always wrapped as ``{'Quantity': n, 'Items': [...]}``.
"""

from typing import Any, Dict, List, Optional

from src.core.resource import (
    ResourceValidationError,
    require_fields,
    validate_max_items,
    validate_not_empty,
)


DEFAULT_TTL = 86400
MAX_TTL = 31536000
MIN_TTL = 0
ORIGIN_KEEPALIVE_TIMEOUT = 5
ORIGIN_READ_TIMEOUT = 30
MAX_LAMBDA_FUNCTION_ASSOCIATIONS = 4


def single(value: Any) -> Optional[Dict[str, Any]]:
    """Unwrap a single-item block declared either as a mapping or a one-item list."""
    if not value:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, (list, tuple)):
        if len(value) > 1:
            raise ResourceValidationError(
                f"Expected at most one block, got {len(value)}"
            )
        return value[0]
    raise ResourceValidationError(f"Expected a mapping, got {type(value).__name__}")


def expand_string_list(values: Optional[List[str]]) -> Dict[str, Any]:
    values = list(values or [])
    result: Dict[str, Any] = {"Quantity": len(values)}
    if values:
        result["Items"] = values
    return result


def flatten_string_list(container: Optional[Dict[str, Any]]) -> List[str]:
    if not container:
        return []
    return list(container.get("Items") or [])


# Cache behaviors

def validate_cache_behavior(m: Dict[str, Any]) -> None:
    context = f"ordered_cache_behavior {m.get('path_pattern', '?')!r}"
    require_fields(
        m,
        [
            "allowed_methods",
            "cached_methods",
            "forwarded_values",
            "path_pattern",
            "target_origin_id",
            "viewer_protocol_policy",
        ],
        context,
    )
    forwarded_values = single(m["forwarded_values"])
    if forwarded_values is None:
        raise ResourceValidationError(f"{context}: 'forwarded_values' is required")
    require_fields(forwarded_values, ["cookies", "query_string"], f"{context} forwarded_values")
    cookies = single(forwarded_values["cookies"])
    if cookies is None:
        raise ResourceValidationError(f"{context} forwarded_values: 'cookies' is required")
    require_fields(cookies, ["forward"], f"{context} cookies")

    associations = m.get("lambda_function_association") or []
    validate_max_items(associations, MAX_LAMBDA_FUNCTION_ASSOCIATIONS, "lambda_function_association")
    for association in associations:
        require_fields(association, ["event_type", "lambda_arn"], f"{context} lambda_function_association")


def expand_cache_behaviors(items: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    behaviors = [expand_cache_behavior(m) for m in items or []]
    return {"Quantity": len(behaviors), "Items": behaviors}


def expand_cache_behavior(m: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "PathPattern": m["path_pattern"],
        "TargetOriginId": m["target_origin_id"],
        "TrustedSigners": expand_trusted_signers(m.get("trusted_signers")),
        "ViewerProtocolPolicy": m["viewer_protocol_policy"],
        "AllowedMethods": expand_allowed_methods(m["allowed_methods"], m["cached_methods"]),
        "SmoothStreaming": bool(m.get("smooth_streaming", False)),
        "Compress": bool(m.get("compress", False)),
        "LambdaFunctionAssociations": expand_lambda_function_associations(
            m.get("lambda_function_association")
        ),
        "FieldLevelEncryptionId": m.get("field_level_encryption_id") or "",
        "ForwardedValues": expand_forwarded_values(single(m["forwarded_values"])),
        "MinTTL": _int(m, "min_ttl", MIN_TTL),
        "DefaultTTL": _int(m, "default_ttl", DEFAULT_TTL),
        "MaxTTL": _int(m, "max_ttl", MAX_TTL),
    }


def flatten_cache_behavior(cb: Dict[str, Any]) -> Dict[str, Any]:
    allowed_methods = cb.get("AllowedMethods") or {}
    return {
        "path_pattern": cb["PathPattern"],
        "target_origin_id": cb["TargetOriginId"],
        "trusted_signers": flatten_string_list(cb.get("TrustedSigners")),
        "viewer_protocol_policy": cb["ViewerProtocolPolicy"],
        "allowed_methods": flatten_string_list(allowed_methods),
        "cached_methods": flatten_string_list(allowed_methods.get("CachedMethods")),
        "smooth_streaming": cb.get("SmoothStreaming", False),
        "compress": cb.get("Compress", False),
        "lambda_function_association": flatten_lambda_function_associations(
            cb.get("LambdaFunctionAssociations")
        ),
        "field_level_encryption_id": cb.get("FieldLevelEncryptionId", ""),
        "forwarded_values": flatten_forwarded_values(cb.get("ForwardedValues") or {}),
        "min_ttl": cb.get("MinTTL", MIN_TTL),
        "default_ttl": cb.get("DefaultTTL", DEFAULT_TTL),
        "max_ttl": cb.get("MaxTTL", MAX_TTL),
    }


def expand_trusted_signers(signers: Optional[List[str]]) -> Dict[str, Any]:
    result = expand_string_list(signers)
    result["Enabled"] = result["Quantity"] > 0
    return result


def expand_allowed_methods(allowed: List[str], cached: List[str]) -> Dict[str, Any]:
    result = expand_string_list(allowed)
    result["CachedMethods"] = expand_string_list(cached)
    return result


def expand_lambda_function_associations(associations: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    items = [
        {
            "EventType": a["event_type"],
            "LambdaFunctionARN": a["lambda_arn"],
            "IncludeBody": bool(a.get("include_body", False)),
        }
        for a in associations or []
    ]
    result: Dict[str, Any] = {"Quantity": len(items)}
    if items:
        result["Items"] = items
    return result


def flatten_lambda_function_associations(container: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not container:
        return []
    return [
        {
            "event_type": a["EventType"],
            "lambda_arn": a["LambdaFunctionARN"],
            "include_body": a.get("IncludeBody", False),
        }
        for a in container.get("Items") or []
    ]


def expand_forwarded_values(m: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "QueryString": bool(m["query_string"]),
        "Cookies": expand_cookie_preference(single(m["cookies"])),
        "Headers": expand_string_list(m.get("headers")),
        "QueryStringCacheKeys": expand_string_list(m.get("query_string_cache_keys")),
    }


def flatten_forwarded_values(fv: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "query_string": fv.get("QueryString", False),
        "cookies": flatten_cookie_preference(fv.get("Cookies") or {}),
        "headers": flatten_string_list(fv.get("Headers")),
        "query_string_cache_keys": flatten_string_list(fv.get("QueryStringCacheKeys")),
    }


def expand_cookie_preference(m: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {"Forward": m["forward"]}
    names = m.get("whitelisted_names")
    if names:
        result["WhitelistedNames"] = expand_string_list(names)
    return result


def flatten_cookie_preference(cp: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "forward": cp.get("Forward"),
        "whitelisted_names": flatten_string_list(cp.get("WhitelistedNames")),
    }


# Origins

def validate_origin(m: Dict[str, Any]) -> None:
    validate_not_empty(m.get("origin_id"), "origin_id")
    validate_not_empty(m.get("domain_name"), "domain_name")
    context = f"origin {m['origin_id']!r}"

    custom = single(m.get("custom_origin_config"))
    s3 = single(m.get("s3_origin_config"))
    if custom and s3:
        raise ResourceValidationError(
            f"{context}: 'custom_origin_config' conflicts with 's3_origin_config'"
        )
    if custom:
        require_fields(
            custom,
            ["http_port", "https_port", "origin_protocol_policy", "origin_ssl_protocols"],
            f"{context} custom_origin_config",
        )
    if s3:
        require_fields(s3, ["origin_access_identity"], f"{context} s3_origin_config")
    for header in m.get("custom_header") or []:
        require_fields(header, ["name", "value"], f"{context} custom_header")


def expand_origins(items: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    origins = [expand_origin(m) for m in items or []]
    return {"Quantity": len(origins), "Items": origins}


def expand_origin(m: Dict[str, Any]) -> Dict[str, Any]:
    origin: Dict[str, Any] = {
        "Id": m["origin_id"],
        "DomainName": m["domain_name"],
        "OriginPath": m.get("origin_path") or "",
        "CustomHeaders": expand_custom_headers(m.get("custom_header")),
    }

    custom = single(m.get("custom_origin_config"))
    s3 = single(m.get("s3_origin_config"))
    if custom:
        origin["CustomOriginConfig"] = expand_custom_origin_config(custom)
    elif s3:
        origin["S3OriginConfig"] = {"OriginAccessIdentity": s3["origin_access_identity"]}
    else:
        # CloudFront requires one origin type; an empty S3 config is accepted
        origin["S3OriginConfig"] = {"OriginAccessIdentity": ""}
    return origin


def flatten_origin(origin: Dict[str, Any]) -> Dict[str, Any]:
    m: Dict[str, Any] = {
        "origin_id": origin["Id"],
        "domain_name": origin["DomainName"],
        "origin_path": origin.get("OriginPath", ""),
        "custom_header": flatten_custom_headers(origin.get("CustomHeaders")),
    }
    if origin.get("CustomOriginConfig"):
        m["custom_origin_config"] = flatten_custom_origin_config(origin["CustomOriginConfig"])
    s3 = origin.get("S3OriginConfig")
    if s3 and s3.get("OriginAccessIdentity"):
        m["s3_origin_config"] = {"origin_access_identity": s3["OriginAccessIdentity"]}
    return m


def expand_custom_headers(headers: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    items = [{"HeaderName": h["name"], "HeaderValue": h["value"]} for h in headers or []]
    result: Dict[str, Any] = {"Quantity": len(items)}
    if items:
        result["Items"] = items
    return result


def flatten_custom_headers(container: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not container:
        return []
    return [
        {"name": h["HeaderName"], "value": h["HeaderValue"]}
        for h in container.get("Items") or []
    ]


def expand_custom_origin_config(m: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "HTTPPort": int(m["http_port"]),
        "HTTPSPort": int(m["https_port"]),
        "OriginProtocolPolicy": m["origin_protocol_policy"],
        "OriginSslProtocols": expand_string_list(m["origin_ssl_protocols"]),
        "OriginKeepaliveTimeout": _int(m, "origin_keepalive_timeout", ORIGIN_KEEPALIVE_TIMEOUT),
        "OriginReadTimeout": _int(m, "origin_read_timeout", ORIGIN_READ_TIMEOUT),
    }


def flatten_custom_origin_config(coc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "http_port": coc["HTTPPort"],
        "https_port": coc["HTTPSPort"],
        "origin_protocol_policy": coc["OriginProtocolPolicy"],
        "origin_ssl_protocols": flatten_string_list(coc.get("OriginSslProtocols")),
        "origin_keepalive_timeout": coc.get("OriginKeepaliveTimeout", ORIGIN_KEEPALIVE_TIMEOUT),
        "origin_read_timeout": coc.get("OriginReadTimeout", ORIGIN_READ_TIMEOUT),
    }


def _int(m: Dict[str, Any], key: str, default: int) -> int:
    value = m.get(key)
    return default if value is None else int(value)
