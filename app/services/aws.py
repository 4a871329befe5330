"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from app.config.settings import AwsConfig


def create_boto3_client(
    service_name: str,
    aws: AwsConfig,
    *,
    region_name: str | None = None,
    client_config: Config | None = None,
) -> Any:
    """Instantiate a boto3 client using configured credentials if available."""

    client_kwargs: dict[str, Any] = {"region_name": region_name or aws.region}
    if aws.has_credentials:
        client_kwargs["aws_access_key_id"] = aws.access_key
        client_kwargs["aws_secret_access_key"] = aws.secret_key.get_secret_value()
    if client_config is not None:
        client_kwargs["config"] = client_config
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client"]
