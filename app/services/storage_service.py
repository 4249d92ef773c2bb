import boto3
import time
from typing import Optional, Tuple
from app.config import settings
import structlog

logger = structlog.get_logger()


def build_video_key(user_id: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build the storage key for an uploaded video: videos/{user_id}/{timestamp}.{ext}

    The timestamp is epoch milliseconds; files without an extension default to mp4.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    file_extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'mp4'
    return f"videos/{user_id}/{timestamp_ms}.{file_extension}"


def normalized_video_key(file_path: str) -> str:
    """videos/u/123.mov -> videos/u/normalized/123.mp4; already normalized keys map to themselves"""
    directory, _, name = file_path.rpartition('/')
    stem = name.rsplit('.', 1)[0]
    if directory == "normalized" or directory.endswith("/normalized"):
        return f"{directory}/{stem}.mp4"
    prefix = f"{directory}/" if directory else ""
    return f"{prefix}normalized/{stem}.mp4"


class StorageService:
    def __init__(self):
        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url
        )
        self.bucket_name = settings.s3_bucket_name

    def generate_presigned_upload_url(self, user_id: str, filename: str, content_type: str) -> Tuple[str, str, dict]:
        """
        Generate a presigned POST for uploading a video to object storage.

        Args:
            user_id: Owner of the upload
            filename: The original filename
            content_type: The MIME type of the file

        Returns:
            Tuple of (presigned_url, storage_key, presigned_fields)
        """
        try:
            key = build_video_key(user_id, filename)

            if not content_type or content_type == 'application/octet-stream':
                content_type = 'video/mp4'
            elif not content_type.startswith('video/'):
                logger.warning(
                    "Unexpected content type for video upload",
                    filename=filename,
                    content_type=content_type
                )

            presigned_post = self.s3_client.generate_presigned_post(
                Bucket=self.bucket_name,
                Key=key,
                Fields={
                    'Content-Type': content_type,
                    'Content-Disposition': 'inline',
                },
                Conditions=[
                    {'Content-Type': content_type},
                    {'Content-Disposition': 'inline'},
                ],
                ExpiresIn=settings.upload_url_expiry_seconds
            )

            logger.info(
                "Generated presigned upload URL",
                filename=filename,
                storage_key=key,
                content_type=content_type
            )

            return presigned_post['url'], key, presigned_post['fields']

        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                error=str(e),
                filename=filename
            )
            raise Exception(f"Failed to generate presigned URL: {str(e)}")

    def generate_access_url(self, key: str) -> str:
        """
        Generate a long-lived presigned GET URL for viewing a stored file.

        Args:
            key: Storage key of the file

        Returns:
            Presigned URL for accessing the file
        """
        try:
            presigned_url = self.s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key
                },
                ExpiresIn=settings.access_url_expiry_seconds
            )

            logger.info("Generated access URL", storage_key=key)
            return presigned_url

        except Exception as e:
            logger.error(
                "Failed to generate access URL",
                error=str(e),
                storage_key=key
            )
            raise Exception(f"Failed to generate access URL: {str(e)}")

    def download_file(self, key: str, destination: str) -> None:
        self.s3_client.download_file(self.bucket_name, key, destination)
        logger.info("Downloaded file from storage", storage_key=key, destination=destination)

    def upload_file(self, source: str, key: str, content_type: str = 'video/mp4') -> None:
        self.s3_client.upload_file(
            source,
            self.bucket_name,
            key,
            ExtraArgs={
                'ContentType': content_type,
                'ContentDisposition': 'inline'
            }
        )
        logger.info("Uploaded file to storage", storage_key=key, source=source)

    def delete_file(self, key: str) -> bool:
        """
        Delete a file from storage.

        Returns:
            True if successful, False otherwise
        """
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info("Deleted file from storage", storage_key=key)
            return True

        except Exception as e:
            logger.error(
                "Failed to delete file from storage",
                error=str(e),
                storage_key=key
            )
            return False
