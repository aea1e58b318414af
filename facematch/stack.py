"""Read the outputs exported by the provisioning stack.

The Pulumi project lives in ``iac/``. Selecting a stack needs the same
``PULUMI_CONFIG_PASSPHRASE`` that was used to create it; the engine reports
a missing or wrong passphrase itself.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from pulumi import automation as auto

from .errors import StackOutputError
from .schema import StackInfo

logger = logging.getLogger(__name__)

BUCKET_OUTPUT = "bucketName"
COLLECTION_OUTPUT = "collectionId"


def _output_value(outputs: Mapping[str, Any], name: str) -> Any:
    out = outputs.get(name)
    if out is None:
        return None
    return getattr(out, "value", out)


def stack_info_from_outputs(outputs: Mapping[str, Any]) -> StackInfo:
    """Build :class:`StackInfo` from ``Stack.outputs()``.

    Both outputs must be present, non-null strings.
    """
    bucket = _output_value(outputs, BUCKET_OUTPUT)
    collection = _output_value(outputs, COLLECTION_OUTPUT)
    if bucket is None or collection is None:
        raise StackOutputError("missing values in stack output")
    if not isinstance(bucket, str) or not isinstance(collection, str):
        raise StackOutputError(
            f"unexpected stack output types: {BUCKET_OUTPUT}={type(bucket).__name__}, "
            f"{COLLECTION_OUTPUT}={type(collection).__name__}"
        )
    return StackInfo(bucket_name=bucket, collection_id=collection)


def get_stack_info(stack_name: str, work_dir: str) -> StackInfo:
    """Select ``stack_name`` in the Pulumi project at ``work_dir`` and read its outputs."""
    try:
        stack = auto.select_stack(stack_name=stack_name, work_dir=work_dir)
    except (auto.CommandError, OSError) as exc:
        raise StackOutputError(f"error selecting stack {stack_name}: {exc}") from exc
    try:
        outputs = stack.outputs()
    except (auto.CommandError, OSError) as exc:
        raise StackOutputError(f"error getting stack outputs for {stack_name}: {exc}") from exc

    info = stack_info_from_outputs(outputs)
    logger.info("Stack info: bucket=%s collection=%s", info.bucket_name, info.collection_id)
    return info


__all__ = ["get_stack_info", "stack_info_from_outputs"]
