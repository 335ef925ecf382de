# ============================================================================
# IMAGE SERVICE TESTS
# ============================================================================
# STATUS: Tests - Product image listing
# PURPOSE: Verify URL templating, marker filtering and error mapping
# CREATED: 19 OCT 2026
# ============================================================================
"""
Image Service Tests

BlobRepository is replaced with a MagicMock; no storage traffic.

Run with:
    pytest tests/test_images.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import HttpResponseError

from core.errors import ConfigError, NotFound, StoreError
from function.services.image_service import ImageService
from infrastructure.storage import BlobRepository


def _repo(names):
    repo = MagicMock()
    repo.account_url = "https://sneakers.blob.core.windows.net"
    repo.list_blob_names.return_value = names
    return repo


class TestListImages:

    def test_maps_names_to_public_urls(self):
        repo = _repo(["images/", "images/a.png", "images/b.jpg"])
        service = ImageService(repo, container="public", prefix="images/")

        assert service.list_images() == [
            "https://sneakers.blob.core.windows.net/public/images/a.png",
            "https://sneakers.blob.core.windows.net/public/images/b.jpg",
        ]
        repo.list_blob_names.assert_called_once_with("public", prefix="images/")

    def test_custom_base_url(self):
        service = ImageService(_repo(["images/a.png"]), container="public", base_url="https://cdn.example.com/")
        assert service.list_images() == ["https://cdn.example.com/images/a.png"]

    @pytest.mark.parametrize("names", [[], ["images/"], ["images/", "images/sub/"]])
    def test_no_images_is_not_found(self, names):
        with pytest.raises(NotFound) as exc_info:
            ImageService(_repo(names), container="public").list_images()
        assert exc_info.value.message == "No images found."

    def test_storage_failure_is_store_error(self):
        repo = _repo([])
        repo.list_blob_names.side_effect = HttpResponseError(message="AuthorizationFailure")

        with pytest.raises(StoreError):
            ImageService(repo, container="public").list_images()


class TestFromConfig:

    def test_requires_storage_account(self, monkeypatch):
        monkeypatch.delenv("IMAGE_STORAGE_ACCOUNT", raising=False)

        with pytest.raises(ConfigError):
            ImageService.from_config()

    def test_builds_from_settings(self, monkeypatch):
        monkeypatch.setenv("IMAGE_STORAGE_ACCOUNT", "sneakers")
        monkeypatch.setenv("IMAGE_CONTAINER", "media")
        monkeypatch.setenv("IMAGE_PREFIX", "shoes/")

        service = ImageService.from_config()

        assert service.container == "media"
        assert service.prefix == "shoes/"
        assert service.base_url == "https://sneakers.blob.core.windows.net/media"


class TestBlobRepository:

    def test_one_instance_per_account(self):
        assert BlobRepository(account_name="acct-one") is BlobRepository(account_name="acct-one")
        assert BlobRepository(account_name="acct-one") is not BlobRepository(account_name="acct-two")

    def test_account_required(self):
        with pytest.raises(ValueError):
            BlobRepository(account_name=None)

    def test_lists_names_under_prefix(self):
        repo = BlobRepository(account_name="acct-list")
        container = MagicMock()
        container.list_blobs.return_value = [MagicMock(name="b1"), MagicMock(name="b2")]
        container.list_blobs.return_value[0].name = "images/a.png"
        container.list_blobs.return_value[1].name = "images/b.png"

        with patch.object(repo, "_get_container_client", return_value=container):
            names = repo.list_blob_names("public", prefix="images/")

        assert names == ["images/a.png", "images/b.png"]
        container.list_blobs.assert_called_once_with(name_starts_with="images/")
