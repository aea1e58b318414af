"""Pulumi program: image bucket, uploads and the Rekognition collection."""
from __future__ import annotations

from pathlib import Path

import pulumi

from facematch.provision import build_stack

IMAGES_DIR = Path(__file__).resolve().parent.parent / "resources" / "images"

config = pulumi.Config()
build_stack(
    bucket_prefix=config.require("bucket_prefix"),
    collection_name=config.require("collection_name"),
    images_dir=IMAGES_DIR,
)
