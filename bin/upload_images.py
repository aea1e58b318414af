#!/usr/bin/env python3
"""Upload the local reference and input images to the stack's bucket.

Provisioning already uploads ``resources/images``; this script refreshes the
objects without running ``pulumi up``:

    ./bin/upload_images.py -stack dev
    ./bin/upload_images.py --images-dir /tmp/more-images --only reference
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))
from facematch.config import Settings
from facematch.errors import FaceMatchError
from facematch.logging_utils import configure_logging
from facematch.provision import local_images
from facematch.stack import get_stack_info
from facematch.storage import ObjectStore

REPO_ROOT = Path(__file__).resolve().parents[1]


def main() -> None:
    parser = argparse.ArgumentParser(description="Upload local images to the stack bucket")
    parser.add_argument("-stack", "--stack", dest="stack", default="dev", help="The name of the pulumi stack")
    parser.add_argument(
        "--images-dir",
        type=Path,
        default=REPO_ROOT / "resources" / "images",
        help="Directory containing input/ and reference/ subdirectories",
    )
    parser.add_argument(
        "--only",
        choices=["input", "reference", "both"],
        default="both",
        help="Which image set(s) to upload",
    )
    args = parser.parse_args()

    configure_logging(1)
    settings = Settings.load()
    prefixes = [args.only] if args.only in {"input", "reference"} else ["input", "reference"]
    try:
        info = get_stack_info(args.stack, settings.iac_dir)
        store = ObjectStore(info.bucket_name, region_name=settings.region_name)
        count = 0
        for prefix in prefixes:
            for path in local_images(args.images_dir / prefix):
                store.upload_file(path, f"{prefix}/{path.name}")
                count += 1
    except (FaceMatchError, FileNotFoundError) as exc:
        print(f"Upload failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"Uploaded {count} image(s) to s3://{info.bucket_name}")


if __name__ == "__main__":
    main()
