"""Map reference image keys to identity labels."""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple

from .errors import FilenameParseError
from .schema import IndexedFace, ReferenceImage

_REFERENCE_KEY = re.compile(r"^reference/([a-z]+)_")


def user_id_from_key(key: str) -> str:
    """Return the label encoded in ``reference/<label>_...``.

    The label is one or more lowercase ASCII letters followed by an
    underscore. Anything else raises :class:`FilenameParseError`.
    """
    match = _REFERENCE_KEY.match(key)
    if not match:
        raise FilenameParseError(key)
    return match.group(1)


def reference_image(key: str) -> ReferenceImage:
    return ReferenceImage(storage_key=key, identity_label=user_id_from_key(key))


def group_faces_by_user(
    faces: Iterable[Tuple[ReferenceImage, IndexedFace]],
) -> Dict[str, List[str]]:
    """Group face ids by identity label, labels in order of discovery."""
    grouped: Dict[str, List[str]] = {}
    for ref, face in faces:
        grouped.setdefault(ref.identity_label, []).append(face.face_id)
    return grouped


__all__ = ["group_faces_by_user", "reference_image", "user_id_from_key"]
