import pytest

from dynamic_secrets.services.folders import InMemoryFolderResolver, normalize_secret_path


@pytest.mark.parametrize(
    "raw, expected",
    [("", "/"), ("/", "/"), ("f1", "/f1"), ("/f1/", "/f1"), ("//a///b/", "/a/b")],
)
def test_normalize_secret_path(raw, expected):
    assert normalize_secret_path(raw) == expected


@pytest.mark.asyncio
async def test_resolver_matches_normalized_paths():
    resolver = InMemoryFolderResolver()
    folder = resolver.add("p", "dev", "/apps/api/")

    assert resolver.add("p", "dev", "apps/api") is folder
    assert await resolver.find_by_secret_path("p", "dev", "//apps/api") == folder
    assert await resolver.find_by_secret_path("p", "prod", "/apps/api") is None
