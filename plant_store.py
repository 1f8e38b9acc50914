"""
plant_store.py — DynamoDB plant table and S3 photo uploads
"""
import logging
from dataclasses import asdict, dataclass, replace
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# record field -> table attribute
CARE_FIELDS = {
    "watered": "Watered",
    "repotted": "Repotted",
    "fertilized": "Fertilized",
}

IMAGE_PREFIX = "plants/"


class StoreError(Exception):
    """A table or bucket call did not apply."""


@dataclass(frozen=True)
class PlantRecord:
    name: str
    image_url: str = ""
    watered: str = ""
    repotted: str = ""
    fertilized: str = ""

    @classmethod
    def from_item(cls, item):
        def text(key):
            value = item.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            name=text("Name"),
            image_url=text("ImageURL"),
            watered=text("Watered"),
            repotted=text("Repotted"),
            fertilized=text("Fertilized"),
        )

    def to_item(self):
        return {
            "Name": self.name,
            "ImageURL": self.image_url,
            "Watered": self.watered,
            "Repotted": self.repotted,
            "Fertilized": self.fertilized,
        }

    def with_field(self, field, value):
        check_care_field(field)
        return replace(self, **{field: value})

    def as_dict(self):
        return asdict(self)


def check_care_field(field):
    if field not in CARE_FIELDS:
        raise ValueError(f"unknown care field: {field!r}")
    return CARE_FIELDS[field]


class PlantStore:
    def __init__(self, table):
        self.table = table

    def scan_all(self):
        """One unfiltered scan; the table is assumed to fit in a single page."""
        try:
            response = self.table.scan()
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"scan failed: {e}") from e
        return [PlantRecord.from_item(item) for item in response.get("Items", [])]

    def update_field(self, name, field, value):
        attr = check_care_field(field)
        try:
            self.table.update_item(
                Key={"Name": name},
                UpdateExpression=f"SET {attr} = :value",
                ExpressionAttributeValues={":value": value},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Unable to update %s for %s: %s", attr, name, e, exc_info=True)
            return False
        logger.info("Updated %s for %s to %s", attr, name, value)
        return True

    def insert(self, record):
        try:
            self.table.put_item(Item=record.to_item())
        except (ClientError, BotoCoreError) as e:
            logger.error("Unable to add plant %s: %s", record.name, e, exc_info=True)
            return False
        logger.info("Added plant %s", record.name)
        return True


class ImageUploader:
    def __init__(self, client, bucket, base_url=None, region=None):
        self.client = client
        self.bucket = bucket
        if base_url:
            self.base_url = base_url.rstrip("/")
        elif region:
            self.base_url = f"https://{bucket}.s3.{region}.amazonaws.com"
        else:
            self.base_url = f"https://{bucket}.s3.amazonaws.com"

    def key_for(self, filename):
        # same file name overwrites the previous upload
        return IMAGE_PREFIX + filename

    def url_for(self, key):
        return f"{self.base_url}/{quote(key)}"

    def upload(self, data, filename, content_type=None):
        key = self.key_for(filename)
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"upload of {key} failed: {e}") from e
        logger.info("Uploaded %s (%d bytes) to %s", key, len(data), self.bucket)
        return self.url_for(key)


def _session(config):
    return boto3.session.Session(
        aws_access_key_id=config.get("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=config.get("AWS_SECRET_ACCESS_KEY"),
        region_name=config.get("AWS_REGION"),
    )


def build_store(config):
    dynamodb = _session(config).resource("dynamodb")
    return PlantStore(dynamodb.Table(config.get("PLANTS_TABLE", "plants")))


def build_uploader(config):
    return ImageUploader(
        _session(config).client("s3"),
        config.get("PLANT_IMAGE_BUCKET"),
        base_url=config.get("PLANT_IMAGE_BASE_URL"),
        region=config.get("AWS_REGION"),
    )
