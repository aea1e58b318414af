"""Settings for the matching pipeline.

Defaults live in ``config/facematch.yaml``; environment variables win over
the file:

    AWS_REGION / AWS_DEFAULT_REGION / REGION   region for boto3 clients; when
                                               neither these nor the file set one,
                                               boto3 resolves it from the AWS profile
    FACEMATCH_IAC_DIR                          Pulumi project directory
    FACEMATCH_CONFIG                           alternate settings file
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = "facematch.yaml"


def _load_mapping(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise RuntimeError(f"Settings in {path} must be defined as a mapping.")
    return data


def find_config_file(filename: str = CONFIG_FILENAME) -> Path:
    """Locate a config file by walking up from this module's directory."""

    here = Path(__file__).resolve()
    for parent in [here.parent] + list(here.parents):
        candidate = parent / "config" / filename
        if candidate.exists():
            return candidate
    return here.parent.parent / "config" / filename


def _aws_region() -> Optional[str]:
    return os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or os.getenv("REGION")


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings shared by the CLI and the bin/ scripts."""

    region_name: Optional[str] = None
    iac_dir: str = "iac"
    reference_prefix: str = "reference/"
    input_prefix: str = "input/"
    reference_max_faces: int = 1
    input_max_faces: int = 10
    face_match_threshold: float = 90.0
    user_match_threshold: float = 75.0

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """Build settings from the YAML file overlaid with the environment."""
        if path is None:
            override = os.getenv("FACEMATCH_CONFIG")
            path = Path(override) if override else find_config_file()
        data = _load_mapping(path)
        defaults = cls()
        return cls(
            region_name=_aws_region() or data.get("region_name"),
            iac_dir=os.getenv("FACEMATCH_IAC_DIR") or str(data.get("iac_dir", defaults.iac_dir)),
            reference_prefix=str(data.get("reference_prefix", defaults.reference_prefix)),
            input_prefix=str(data.get("input_prefix", defaults.input_prefix)),
            reference_max_faces=int(data.get("reference_max_faces", defaults.reference_max_faces)),
            input_max_faces=int(data.get("input_max_faces", defaults.input_max_faces)),
            face_match_threshold=float(
                data.get("face_match_threshold", defaults.face_match_threshold)
            ),
            user_match_threshold=float(
                data.get("user_match_threshold", defaults.user_match_threshold)
            ),
        )


__all__ = ["Settings", "find_config_file"]
