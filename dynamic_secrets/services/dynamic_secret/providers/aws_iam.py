from __future__ import annotations

import json
import re

from pydantic import Field, field_validator

from .base import DynamicSecretProvider, ProviderInput

_REGION = re.compile(r"^[a-z]{2}(-gov|-iso[a-z]?)?-[a-z]+-\d+$")
_IAM_ARN = re.compile(r"^arn:aws[a-z-]*:iam::(\d{12}|aws):policy/.+$")


def _split_csv(value: str | None) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class AwsIamInput(ProviderInput):
    access_key: str = Field(min_length=1)
    secret_access_key: str = Field(min_length=1)
    region: str
    aws_path: str = "/"
    permission_boundary_policy_arn: str | None = None
    policy_document: str | None = None
    user_groups: str | None = None
    policy_arns: str | None = None

    @field_validator("region")
    @classmethod
    def _check_region(cls, value: str) -> str:
        if not _REGION.match(value):
            raise ValueError(f"invalid AWS region {value!r}")
        return value

    @field_validator("aws_path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not (value.startswith("/") and value.endswith("/")):
            raise ValueError("path must begin and end with '/'")
        return value

    @field_validator("permission_boundary_policy_arn")
    @classmethod
    def _check_boundary(cls, value: str | None) -> str | None:
        if value and not _IAM_ARN.match(value):
            raise ValueError("must be an IAM policy ARN")
        return value or None

    @field_validator("policy_arns")
    @classmethod
    def _check_policy_arns(cls, value: str | None) -> str | None:
        arns = _split_csv(value)
        for arn in arns:
            if not _IAM_ARN.match(arn):
                raise ValueError(f"invalid policy ARN {arn!r}")
        return ",".join(arns) or None

    @field_validator("policy_document")
    @classmethod
    def _check_policy_document(cls, value: str | None) -> str | None:
        if not value:
            return None
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError("policy document must be valid JSON") from exc
        if not isinstance(parsed, dict):
            raise ValueError("policy document must be a JSON object")
        return value

    @field_validator("user_groups")
    @classmethod
    def _check_groups(cls, value: str | None) -> str | None:
        return ",".join(_split_csv(value)) or None


class AwsIamProvider(DynamicSecretProvider):
    """Short-lived IAM users with access keys."""

    type = "aws-iam"
    input_model = AwsIamInput
