"""
=============================================================================
S3 SERVICE - Archive of uploaded usage exports
=============================================================================
Every export that the shell accepts can be copied, byte for byte, into an S3
bucket so it can be listed and loaded again later.

Keys look like:
    uploads/20250621T120000Z_usage.csv

Enabled with USE_S3_STORAGE=true. Credentials come from the usual AWS
environment variables (see S3Service.__init__).
=============================================================================
"""

import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

# boto3 - the AWS SDK for Python
import boto3
# ClientError - raised by boto3 for any failed AWS API call
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# All archived exports live under this "folder" in the bucket
UPLOAD_PREFIX = 'uploads/'


class S3Service:
    """
    Store and fetch raw usage exports in one S3 bucket.

    Usage:
        s3 = S3Service()
        s3.create_bucket_if_not_exists()
        key = s3.upload_file(b"123 Main St\\n\\nTYPE,...", "usage.csv")
        text = s3.download_file(key).decode("utf-8")
    """

    def __init__(self, bucket_name: str = None, client=None):
        """
        Args:
            bucket_name: Optional bucket name. Falls back to S3_BUCKET_NAME,
                         then 'electricity-usage-exports'.
            client: Optional pre-built boto3 S3 client. When omitted one is
                    created from AWS_REGION, AWS_ACCESS_KEY_ID,
                    AWS_SECRET_ACCESS_KEY and AWS_SESSION_TOKEN.
        """
        self.bucket_name = bucket_name or os.getenv('S3_BUCKET_NAME', 'electricity-usage-exports')
        self.region = os.getenv('AWS_REGION', 'us-east-1')

        if client is None:
            session_token = os.getenv('AWS_SESSION_TOKEN')
            client = boto3.client(
                's3',
                region_name=self.region,
                aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
                aws_session_token=session_token if session_token else None
            )
        self.s3_client = client

    def create_bucket_if_not_exists(self) -> bool:
        """
        Returns:
            bool: True if the bucket exists or was created

        Note:
            us-east-1 must not be given a LocationConstraint.
        """
        try:
            # head_bucket is a cheap existence check
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            # Anything but "not found" (e.g. 403) means we cannot use the bucket
            if e.response['Error']['Code'] != '404':
                logger.error("Error checking bucket %s: %s", self.bucket_name, e)
                return False

        try:
            if self.region == 'us-east-1':
                self.s3_client.create_bucket(Bucket=self.bucket_name)
            else:
                self.s3_client.create_bucket(
                    Bucket=self.bucket_name,
                    CreateBucketConfiguration={'LocationConstraint': self.region}
                )
            logger.info("Created bucket: %s", self.bucket_name)
            return True
        except ClientError as e:
            logger.error("Failed to create bucket %s: %s", self.bucket_name, e)
            return False

    def upload_file(self, file_content: bytes, filename: str, content_type: str = 'text/csv') -> Optional[str]:
        """
        Archive one export under a timestamped key.

        Returns:
            str: The S3 key of the stored export, or None if the upload failed
        """
        # Timestamp prefix keeps keys unique and sorted oldest first
        timestamp = datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')
        s3_key = f"{UPLOAD_PREFIX}{timestamp}_{filename}"

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=file_content,
                ContentType=content_type
            )
            return s3_key
        except ClientError as e:
            logger.error("Failed to upload %s to S3: %s", filename, e)
            return None

    def download_file(self, s3_key: str) -> Optional[bytes]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=s3_key)
            return response['Body'].read()
        except ClientError as e:
            logger.error("Failed to download %s from S3: %s", s3_key, e)
            return None

    def list_files(self, prefix: str = UPLOAD_PREFIX) -> List[Dict]:
        """
        Returns:
            list: dicts with key, size (bytes) and last_modified (ISO 8601)
        """
        try:
            # Single page: at most 1000 keys are returned
            response = self.s3_client.list_objects_v2(Bucket=self.bucket_name, Prefix=prefix)
        except ClientError as e:
            logger.error("Failed to list exports: %s", e)
            return []

        return [
            {
                'key': obj['Key'],
                'size': obj['Size'],
                'last_modified': obj['LastModified'].isoformat()
            }
            for obj in response.get('Contents', [])
        ]
