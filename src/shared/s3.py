"""S3 utilities and helper functions."""

import os
import boto3
from typing import Optional
from botocore.exceptions import BotoCoreError, ClientError
import logging

from .exceptions import StorageError

logger = logging.getLogger(__name__)

MISSING_KEY_CODES = ('NoSuchKey', '404', 'NotFound')


class S3Client:
    """S3 client wrapper for reading and writing whole text objects."""

    def __init__(self, bucket_name: str, client=None):
        """
        Initialize S3 client.

        Args:
            bucket_name: Name of the S3 bucket
            client: Optional preconfigured boto3 S3 client
        """
        self.bucket_name = bucket_name

        if client is not None:
            self.s3 = client
            return

        # Support for LocalStack
        endpoint_url = os.environ.get('LOCALSTACK_ENDPOINT')
        if endpoint_url and os.environ.get('USE_LOCALSTACK', 'false').lower() == 'true':
            self.s3 = boto3.client('s3', endpoint_url=endpoint_url)
        else:
            self.s3 = boto3.client('s3')

    def read_text(self, key: str) -> Optional[str]:
        """
        Download an object as UTF-8 text.

        Args:
            key: S3 object key

        Returns:
            Object content, or None if the key doesn't exist

        Raises:
            StorageError: If the download fails
        """
        try:
            response = self.s3.get_object(Bucket=self.bucket_name, Key=key)
            return response['Body'].read().decode('utf-8')
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in MISSING_KEY_CODES:
                return None
            logger.error(f"Error downloading s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to download object: {str(e)}")
        except BotoCoreError as e:
            logger.error(f"Error downloading s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to download object: {str(e)}")
        except UnicodeDecodeError as e:
            logger.error(f"Object s3://{self.bucket_name}/{key} is not valid UTF-8: {e}")
            raise StorageError(f"Failed to decode object: {str(e)}")

    def write_text(self, key: str, content: str, content_type: str = 'application/json') -> str:
        """
        Upload text content, replacing any existing object.

        Args:
            key: S3 object key
            content: Text to store
            content_type: Content type of the object

        Returns:
            S3 object key

        Raises:
            StorageError: If the upload fails
        """
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content.encode('utf-8'),
                ContentType=content_type,
                ServerSideEncryption='AES256'
            )
            logger.debug(f"Wrote s3://{self.bucket_name}/{key}")
            return key
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to upload object: {str(e)}")

    def delete(self, key: str) -> None:
        """
        Delete an object.

        Args:
            key: S3 object key

        Raises:
            StorageError: If the deletion fails
        """
        try:
            self.s3.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info(f"Deleted s3://{self.bucket_name}/{key}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to delete object: {str(e)}")
