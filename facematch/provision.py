"""Pulumi resources for the matching pipeline.

One private bucket holds both image sets (``input/`` and ``reference/``),
and one Rekognition collection holds the indexed faces and users. Used by
the program in ``iac/__main__.py``.
"""
from __future__ import annotations

from pathlib import Path
from typing import List

import pulumi
import pulumi_aws as aws


def local_images(source_dir: Path) -> List[Path]:
    """Regular files directly under ``source_dir``, sorted by name."""
    if not source_dir.is_dir():
        raise FileNotFoundError(f"error reading directory: {source_dir}")
    return sorted((p for p in source_dir.iterdir() if p.is_file()), key=lambda p: p.name)


def create_bucket(prefix: str) -> aws.s3.Bucket:
    bucket = aws.s3.Bucket(prefix, acl="private", force_destroy=True)
    aws.s3.BucketVersioningV2(
        "rekognition-bucket-versioning",
        bucket=bucket.bucket,
        versioning_configuration=aws.s3.BucketVersioningV2VersioningConfigurationArgs(
            status="Disabled",
        ),
    )
    return bucket


def upload_files(source_dir: Path, bucket: aws.s3.Bucket, target_prefix: str) -> List[aws.s3.BucketObject]:
    objects = []
    for path in local_images(source_dir):
        key = f"{target_prefix}/{path.name}"
        objects.append(
            aws.s3.BucketObject(
                key,
                bucket=bucket.bucket,
                key=key,
                source=pulumi.FileAsset(str(path)),
            )
        )
    return objects


def create_collection(name: str) -> aws.rekognition.Collection:
    return aws.rekognition.Collection(name, collection_id=name)


def build_stack(bucket_prefix: str, collection_name: str, images_dir: Path) -> None:
    """Declare every resource and export ``bucketName`` and ``collectionId``."""
    bucket = create_bucket(bucket_prefix)
    upload_files(images_dir / "input", bucket, "input")
    upload_files(images_dir / "reference", bucket, "reference")

    collection = create_collection(collection_name)

    pulumi.export("bucketName", bucket.bucket)
    pulumi.export("collectionId", collection.collection_id)


__all__ = ["build_stack", "create_bucket", "create_collection", "local_images", "upload_files"]
