"""
StorageService tests: public URL parsing, object paths, uploads and
downloads against a mocked Supabase storage client.
"""

import base64
from unittest.mock import MagicMock

import pytest

from pagesmith.services.storage_service import (
    StorageError,
    StorageService,
    build_object_path,
    parse_public_url,
)

PUBLIC = "https://abc.supabase.co/storage/v1/object/public"


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def storage(mock_db):
    return StorageService(supabase=mock_db)


# ============================================================================
# URL helpers
# ============================================================================

class TestParsePublicUrl:
    def test_bucket_and_path(self):
        assert parse_public_url(f"{PUBLIC}/wireframes/u1/123-ab.png") == ("wireframes", "u1/123-ab.png")

    def test_path_is_unquoted(self):
        assert parse_public_url(f"{PUBLIC}/wireframes/u1/my%20sketch.png") == ("wireframes", "u1/my sketch.png")

    def test_query_string_ignored(self):
        assert parse_public_url(f"{PUBLIC}/wireframes/u1/a.png?t=1") == ("wireframes", "u1/a.png")

    @pytest.mark.parametrize("url", [
        "",
        "https://example.com/image.png",
        f"{PUBLIC}/wireframes",
        f"{PUBLIC}/",
    ])
    def test_not_a_storage_url(self, url):
        assert parse_public_url(url) is None


class TestBuildObjectPath:
    def test_layout(self):
        path = build_object_path("u1", "Sketch.PNG", now=1.5)
        user, name = path.split("/")
        assert user == "u1"
        assert name.startswith("1500-")
        assert name.endswith(".png")

    def test_no_extension(self):
        assert build_object_path("u1", "README", now=0).endswith(".bin")

    def test_random_suffix(self):
        assert build_object_path("u1", "a.png", now=0) != build_object_path("u1", "a.png", now=0)


# ============================================================================
# Upload / download
# ============================================================================

class TestUpload:
    def test_upload_returns_public_url(self, storage, mock_db):
        bucket = mock_db.storage.from_.return_value
        bucket.get_public_url.return_value = f"{PUBLIC}/wireframes/u1/a.png"

        result = storage.upload("wireframes", "u1/a.png", b"data")

        mock_db.storage.from_.assert_called_with("wireframes")
        path, data, options = bucket.upload.call_args[0]
        assert (path, data) == ("u1/a.png", b"data")
        assert options["content-type"] == "image/png"
        assert options["upsert"] == "false"
        assert result == {"path": "u1/a.png", "public_url": f"{PUBLIC}/wireframes/u1/a.png"}

    def test_upload_failure(self, storage, mock_db):
        mock_db.storage.from_.return_value.upload.side_effect = Exception("Duplicate")
        with pytest.raises(StorageError):
            storage.upload("wireframes", "u1/a.png", b"data")

    def test_upload_asset_routes_to_kind_bucket(self, storage, mock_db):
        mock_db.storage.from_.return_value.get_public_url.return_value = "url"
        result = storage.upload_asset("inspiration", "u1", "mood.jpg", b"img")

        mock_db.storage.from_.assert_called_with("design-inspirations")
        assert result["path"].startswith("u1/")
        assert result["path"].endswith(".jpg")
        options = mock_db.storage.from_.return_value.upload.call_args[0][2]
        assert options["content-type"] == "image/jpeg"

    def test_upload_asset_unknown_kind(self, storage):
        with pytest.raises(ValueError):
            storage.upload_asset("video", "u1", "a.mp4", b"")


class TestDownload:
    def test_download_public_url(self, storage, mock_db):
        mock_db.storage.from_.return_value.download.return_value = b"\x89PNG"
        data, mime = storage.download_public_url(f"{PUBLIC}/wireframes/u1/a.png")
        assert data == b"\x89PNG"
        assert mime == "image/png"
        mock_db.storage.from_.return_value.download.assert_called_with("u1/a.png")

    def test_empty_download(self, storage, mock_db):
        mock_db.storage.from_.return_value.download.return_value = b""
        with pytest.raises(StorageError):
            storage.download("wireframes", "u1/a.png")

    def test_download_error(self, storage, mock_db):
        mock_db.storage.from_.return_value.download.side_effect = Exception("404")
        with pytest.raises(StorageError):
            storage.download("wireframes", "u1/a.png")

    def test_foreign_url(self, storage):
        with pytest.raises(StorageError):
            storage.download_public_url("https://example.com/a.png")

    def test_data_url(self, storage, mock_db):
        mock_db.storage.from_.return_value.download.return_value = b"abc"
        data_url = storage.download_as_data_url(f"{PUBLIC}/design-inspirations/u1/a.jpg")
        assert data_url == "data:image/jpeg;base64," + base64.b64encode(b"abc").decode()
