from .aws_iam import AwsIamInput, AwsIamProvider
from .base import DynamicSecretProvider, ProviderInput
from .registry import ProviderRegistry, build_default_registry
from .sql_database import SqlClient, SqlDatabaseInput, SqlDatabaseProvider

__all__ = [
    "AwsIamInput",
    "AwsIamProvider",
    "DynamicSecretProvider",
    "ProviderInput",
    "ProviderRegistry",
    "SqlClient",
    "SqlDatabaseInput",
    "SqlDatabaseProvider",
    "build_default_registry",
]
