"""Tests for S3StorageService against a mocked boto3 client."""

import hashlib
import io
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from dealroom.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StorageDeleteError,
    StorageListError,
)
from dealroom.infrastructure.external.storage.s3_storage import S3StorageService

KEY = "deal123/financials/1690000000-report.pdf"


def not_found() -> ClientError:
    return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock()
    mock.head_object.side_effect = not_found()
    return mock


@pytest.fixture
def s3(client: MagicMock) -> S3StorageService:
    return S3StorageService("deal-documents", client=client)


async def test_upload_puts_object_with_checksum(s3: S3StorageService, client: MagicMock) -> None:
    content = b"%PDF"
    checksum = hashlib.sha256(content).hexdigest()
    info = await s3.upload(
        io.BytesIO(content), KEY, checksum, "application/pdf", metadata={"deal_id": "deal123"}
    )
    assert info["size"] == 4
    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "deal-documents"
    assert kwargs["Key"] == KEY
    assert kwargs["Metadata"] == {"sha256": checksum, "deal-id": "deal123"}


async def test_upload_existing_key_with_other_content(s3: S3StorageService, client: MagicMock) -> None:
    client.head_object.side_effect = None
    client.head_object.return_value = {"Metadata": {"sha256": "other"}, "ContentLength": 3}
    with pytest.raises(StorageAlreadyExistsError):
        await s3.upload(io.BytesIO(b"abc"), KEY, hashlib.sha256(b"abc").hexdigest(), "application/pdf")
    client.put_object.assert_not_called()


async def test_delete_missing_returns_false(s3: S3StorageService, client: MagicMock) -> None:
    assert not await s3.delete(KEY)
    client.delete_object.assert_not_called()


async def test_delete_existing(s3: S3StorageService, client: MagicMock) -> None:
    client.head_object.side_effect = None
    assert await s3.delete(KEY)
    client.delete_object.assert_called_once_with(Bucket="deal-documents", Key=KEY)


async def test_delete_error_is_wrapped(s3: S3StorageService, client: MagicMock) -> None:
    client.head_object.side_effect = None
    client.delete_object.side_effect = RuntimeError("denied")
    with pytest.raises(StorageDeleteError):
        await s3.delete(KEY)


async def test_list_folder_uses_prefix_search(s3: S3StorageService, client: MagicMock) -> None:
    client.list_objects_v2.return_value = {
        "Contents": [
            {"Key": "deal123/financials/1690000000-report.pdf"},
            {"Key": "deal123/financials/1690000000-report.pdf.bak"},
        ]
    }
    names = await s3.list_folder("deal123/financials", search="1690000000-report.pdf")
    assert names == ["1690000000-report.pdf", "1690000000-report.pdf.bak"]
    client.list_objects_v2.assert_called_once_with(
        Bucket="deal-documents",
        Prefix="deal123/financials/1690000000-report.pdf",
        Delimiter="/",
        MaxKeys=100,
    )


async def test_list_folder_error(s3: S3StorageService, client: MagicMock) -> None:
    client.list_objects_v2.side_effect = RuntimeError("boom")
    with pytest.raises(StorageListError):
        await s3.list_folder("deal123/financials")


async def test_presigned_url_expiry(s3: S3StorageService, client: MagicMock) -> None:
    client.generate_presigned_url.return_value = "https://s3/signed"
    url = await s3.generate_download_url(KEY, expiration=timedelta(hours=1))
    assert url == "https://s3/signed"
    assert client.generate_presigned_url.call_args.kwargs["ExpiresIn"] == 3600
