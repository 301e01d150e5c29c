from typing import Any, Optional

import anyio.to_thread
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import NotFoundError, UpstreamServiceError
from src.platform.logging.loguru_io import Logger
from src.service.box_office.app.interface.i_object_storage import IObjectStorage


class S3ObjectStorage(IObjectStorage):
    """
    S3-compatible object storage (AWS S3, MinIO, Supabase storage S3 endpoint).

    boto3 is blocking; calls run on a worker thread. The client is created lazily
    so building the container never touches the network.
    """

    def __init__(
        self,
        *,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.endpoint_url = endpoint_url or settings.S3_ENDPOINT_URL or None
        self.region = region or settings.S3_REGION
        self.public_base_url = (public_base_url or settings.S3_PUBLIC_BASE_URL or '').rstrip('/')
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                's3',
                endpoint_url=self.endpoint_url,
                region_name=self.region,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY.get_secret_value() or None,
            )
        return self._client

    def public_url(self, *, bucket: str, path: str) -> str:
        if self.public_base_url:
            return f'{self.public_base_url}/{bucket}/{path}'
        if self.endpoint_url:
            return f'{self.endpoint_url.rstrip("/")}/{bucket}/{path}'
        return f'https://{bucket}.s3.{self.region}.amazonaws.com/{path}'

    @Logger.io
    async def upload(self, *, bucket: str, path: str, data: bytes, content_type: str) -> str:
        try:
            await anyio.to_thread.run_sync(
                lambda: self.client.put_object(
                    Bucket=bucket, Key=path, Body=data, ContentType=content_type
                )
            )
        except (BotoCoreError, ClientError) as e:
            Logger.base.error(f'🗄️ [STORAGE] Upload failed for {bucket}/{path}: {e}')
            raise UpstreamServiceError('Failed to store file') from e

        return self.public_url(bucket=bucket, path=path)

    @Logger.io
    async def download(self, *, bucket: str, path: str) -> bytes:
        def _get_object() -> bytes:
            response = self.client.get_object(Bucket=bucket, Key=path)
            return response['Body'].read()

        try:
            return await anyio.to_thread.run_sync(_get_object)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                raise NotFoundError('File not found') from e
            Logger.base.error(f'🗄️ [STORAGE] Download failed for {bucket}/{path}: {e}')
            raise UpstreamServiceError('Failed to fetch file') from e
        except BotoCoreError as e:
            Logger.base.error(f'🗄️ [STORAGE] Download failed for {bucket}/{path}: {e}')
            raise UpstreamServiceError('Failed to fetch file') from e
