import pytest
from pydantic import ValidationError as PydanticValidationError

from dynamic_secrets.schemas.dynamic_secret import CreateDynamicSecretDTO, UpdateDynamicSecretDTO
from tests.conftest import actor_scope


def _create(**overrides):
    data = actor_scope(
        slug="db1",
        provider={"type": "postgres", "inputs": {"host": "x", "port": 5432}},
        default_ttl=3600,
        max_ttl=7200,
    )
    data.update(overrides)
    return CreateDynamicSecretDTO(**data)


def test_create_dto_accepts_valid_payload():
    dto = _create()
    assert dto.slug == "db1"
    assert dto.provider.type == "postgres"


@pytest.mark.parametrize("slug", ["", "Has-Upper", "under_score", "-lead", "a" * 65])
def test_create_dto_rejects_bad_slug(slug):
    with pytest.raises(PydanticValidationError):
        _create(slug=slug)


def test_ttl_bounds():
    with pytest.raises(PydanticValidationError):
        _create(default_ttl=7200, max_ttl=3600)
    with pytest.raises(PydanticValidationError):
        _create(default_ttl=0)
    assert _create(max_ttl=None).max_ttl is None


def test_update_dto_tracks_explicit_fields():
    dto = UpdateDynamicSecretDTO(**actor_scope(slug="db1", max_ttl=None))
    assert "max_ttl" in dto.model_fields_set
    assert "default_ttl" not in dto.model_fields_set


@pytest.mark.parametrize("raw", ["/secret/x", "//secret/x", "/secret/x/", "secret/x", " secret//x/ "])
def test_actor_scope_path_is_normalized(raw):
    assert _create(path=raw).path == "/secret/x"
