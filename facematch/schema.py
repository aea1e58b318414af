from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List


@dataclass(frozen=True, slots=True)
class StackInfo:
    """Exported outputs of the provisioning stack."""

    bucket_name: str
    collection_id: str


@dataclass(frozen=True, slots=True)
class ReferenceImage:
    storage_key: str
    identity_label: str


@dataclass(frozen=True, slots=True)
class IndexedFace:
    face_id: str
    source_image: str


@dataclass(slots=True)
class MatchResult:
    """Identities found in one input image, first-seen order, no duplicates."""

    image: str
    user_ids: List[str] = field(default_factory=list)

    def add(self, user_id: str) -> bool:
        """Record ``user_id``; returns False when it was already present."""
        if user_id in self.user_ids:
            return False
        self.user_ids.append(user_id)
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self.user_ids)

    def __len__(self) -> int:
        return len(self.user_ids)


__all__ = ["IndexedFace", "MatchResult", "ReferenceImage", "StackInfo"]
