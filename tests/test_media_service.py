"""
Tests for the S3 media service and the temp file staging
"""

import os

import boto3
import pytest
from botocore.stub import ANY, Stubber
from fastapi import UploadFile

from app.core.errors import ValidationError
from app.services.file_service import FileService
from app.services.media_service import S3MediaService

BUCKET = "media-bucket"


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing"
    )


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    return str(path)


async def test_upload_returns_public_url_and_removes_file(s3_client, image_file):
    service = S3MediaService(s3_client=s3_client, bucket_name=BUCKET)

    with Stubber(s3_client) as stubber:
        stubber.add_response(
            "put_object",
            {"ETag": '"etag"'},
            {"Bucket": BUCKET, "Key": ANY, "Body": ANY, "ContentType": "image/png"}
        )
        url = await service.upload(image_file)
        stubber.assert_no_pending_responses()

    assert url.startswith(f"https://{BUCKET}.s3.us-east-1.amazonaws.com/media/")
    assert url.endswith(".png")
    assert not os.path.exists(image_file)


async def test_upload_failure_returns_none_and_removes_file(s3_client, image_file):
    service = S3MediaService(s3_client=s3_client, bucket_name=BUCKET)

    with Stubber(s3_client) as stubber:
        stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
        url = await service.upload(image_file)

    assert url is None
    assert not os.path.exists(image_file)


async def test_upload_without_path(s3_client):
    service = S3MediaService(s3_client=s3_client, bucket_name=BUCKET)

    assert await service.upload(None) is None


def test_bucket_name_is_required(s3_client):
    with pytest.raises(ValueError):
        S3MediaService(s3_client=s3_client)


async def test_save_temp_stages_image(tmp_path, image_file):
    service = FileService(temp_directory=str(tmp_path / "staging"))

    with open(image_file, "rb") as file:
        path = await service.save_temp(UploadFile(file=file, filename="Photo.PNG"))

    assert path.endswith(".png")
    assert os.path.exists(path)

    service.discard(path, None)
    assert not os.path.exists(path)


async def test_save_temp_rejects_other_types(tmp_path, image_file):
    service = FileService(temp_directory=str(tmp_path / "staging"))

    with open(image_file, "rb") as file:
        with pytest.raises(ValidationError):
            await service.save_temp(UploadFile(file=file, filename="notes.txt"))


async def test_save_temp_without_file(tmp_path):
    assert await FileService(temp_directory=str(tmp_path)).save_temp(None) is None
