"""Image storage tests"""

from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from premier_realty.utils import storage

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeBucket:
    def __init__(self):
        self.objects = {}
        self.fail = False

    def put_object(self, Bucket, Key, Body, ContentType, CacheControl):
        if self.fail:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.objects[Key] = {
            "Body": Body,
            "ContentType": ContentType,
            "LastModified": datetime(2025, 3, 3, 9, len(self.objects), tzinfo=timezone.utc),
        }

    def list_objects_v2(self, Bucket, MaxKeys, Prefix=""):
        contents = [
            {"Key": key, "Size": len(obj["Body"]), "LastModified": obj["LastModified"]}
            for key, obj in self.objects.items()
            if key.startswith(Prefix)
        ]
        return {"Contents": contents[:MaxKeys]}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)


@pytest.fixture
def bucket(monkeypatch):
    fake = FakeBucket()
    monkeypatch.setattr(storage, "get_storage_client", lambda: fake)
    return fake


def upload(client, headers, content=PNG, content_type="image/png", folder="properties"):
    return client.post(
        "/admin/images",
        files={"file": ("photo.png", content, content_type)},
        data={"folder": folder},
        headers=headers,
    )


def test_upload(client, admin_headers, bucket):
    response = upload(client, admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["key"].startswith("properties/")
    assert data["key"].endswith(".png")
    assert data["url"] == f"http://storage.test/public/images/{data['key']}"
    assert bucket.objects[data["key"]]["ContentType"] == "image/png"


def test_rejects_bad_uploads(client, admin_headers, bucket):
    assert upload(client, admin_headers, content_type="application/pdf").status_code == 400
    assert upload(client, admin_headers, folder="private").status_code == 400
    assert upload(client, admin_headers, content=b"").status_code == 400
    assert bucket.objects == {}


def test_rejects_large_files(client, admin_headers, bucket, monkeypatch):
    monkeypatch.setattr(storage, "MAX_IMAGE_SIZE", 16)
    response = upload(client, admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "File too large. Maximum size is 10MB"


def test_list_newest_first(client, admin_headers, bucket):
    upload(client, admin_headers, folder="blog")
    upload(client, admin_headers, folder="blog")
    upload(client, admin_headers, folder="hero")

    data = client.get("/admin/images", params={"folder": "blog"}, headers=admin_headers).json()

    assert len(data) == 2
    assert all(item["key"].startswith("blog/") for item in data)
    assert data[0]["lastModified"] > data[1]["lastModified"]


def test_delete(client, admin_headers, bucket):
    key = upload(client, admin_headers).json()["key"]

    response = client.delete("/admin/images", params={"key": key}, headers=admin_headers)

    assert response.status_code == 200
    assert bucket.objects == {}


def test_delete_outside_image_folders(client, admin_headers, bucket):
    assert client.delete("/admin/images", params={"key": "secrets/x.png"}, headers=admin_headers).status_code == 400
    assert client.delete("/admin/images", params={"key": "blog/../x.png"}, headers=admin_headers).status_code == 400


def test_backend_failure(client, admin_headers, bucket):
    bucket.fail = True
    assert upload(client, admin_headers).status_code == 502


def test_storage_not_configured(client, admin_headers, monkeypatch):
    monkeypatch.setattr(storage, "STORAGE_ENDPOINT_URL", None)
    assert upload(client, admin_headers).status_code == 503


def test_requires_admin(client, bucket):
    assert upload(client, {}).status_code in (401, 403)
