import boto3
import logging
from typing import Optional
from botocore.exceptions import ClientError

from app.core.config import settings
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class S3Service:
    def __init__(self, bucket_name: str = None, client=None):
        self.bucket_name = bucket_name if bucket_name is not None else settings.AWS_S3_BUCKET
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.bucket_name)

    @property
    def s3_client(self):
        if self._client is None:
            self._client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION
            )
        return self._client

    def upload_file(self, path: str, udin: str, filename: str, content_type: str = None) -> tuple[str, str]:
        """Upload a stored document to S3 and return (s3_key, bucket_name)"""
        s3_key = f"documents/{udin}/{filename}"
        extra_args = {'ContentType': content_type} if content_type else {}
        try:
            self.s3_client.upload_file(path, self.bucket_name, s3_key, ExtraArgs=extra_args)
        except ClientError as e:
            raise ExternalServiceError(f"Failed to upload file to S3: {str(e)}")
        return s3_key, self.bucket_name

    def delete_file(self, s3_key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
            return True
        except ClientError as e:
            logger.error("Failed to delete %s from S3: %s", s3_key, e)
            return False

    def generate_presigned_url(self, s3_key: str, expiration: int = 3600) -> Optional[str]:
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': s3_key},
                ExpiresIn=expiration
            )
        except ClientError:
            return None


s3_service = S3Service()
