from dynamic_secrets.repositories import DynamicSecretLeaseRepository, DynamicSecretRepository
from dynamic_secrets.services.dynamic_secret.factory import get_dynamic_secret_service, get_provider_registry
from dynamic_secrets.services.dynamic_secret.scheduler import CeleryPruningScheduler


def test_service_is_wired_against_sql_and_celery(async_session, folders, permissions):
    service = get_dynamic_secret_service(async_session, folder_resolver=folders, permission_service=permissions)

    assert isinstance(service.store, DynamicSecretRepository)
    assert isinstance(service.lease_index, DynamicSecretLeaseRepository)
    assert isinstance(service.pruning_scheduler, CeleryPruningScheduler)
    assert service.providers is get_provider_registry()
    assert "postgres" in service.providers
