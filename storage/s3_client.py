from __future__ import annotations

import aioboto3
from typing import Optional
from settings.config import settings


class S3Client:
    def __init__(self, region: Optional[str] = None):
        self.region = region or settings.AWS_REGION

    async def put_bytes(self, bucket: str, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        session = aioboto3.Session()
        async with session.client("s3", region_name=self.region) as s3:
            await s3.put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
        return f"s3://{bucket}/{key}"

    def public_url(self, bucket: str, key: str) -> str:
        base = settings.AWS_S3_PUBLIC_BASE_URL or f"https://{bucket}.s3.{self.region}.amazonaws.com"
        return f"{base.rstrip('/')}/{key}"

