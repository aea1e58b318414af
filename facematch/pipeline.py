"""Reference indexing and input image resolution.

A :class:`MatchingRun` carries everything one run needs: the stack outputs,
settings, the S3 and Rekognition adapters and the user cache. Its two stages
run in order:

1. :meth:`MatchingRun.index_and_associate_faces` indexes the largest face of
   every ``reference/<user>_*`` image, creates one user per label and
   associates the faces with it.
2. :meth:`MatchingRun.process_input_images` indexes up to ten faces of every
   input image and resolves each of them to a user through the reference
   faces. Nothing is created in this stage.

Per-item helpers return :mod:`facematch.outcome` values; the stages log
warnings and raise on ``Fatal``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple, TypeVar

from .config import Settings
from .errors import FaceMatchError
from .filenames import group_faces_by_user, reference_image
from .outcome import Fatal, Ok, Outcome, Warned
from .rekognition import FaceCollection
from .schema import IndexedFace, MatchResult, ReferenceImage, StackInfo
from .storage import ObjectStore
from .users import UserRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _best(matches: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Highest similarity wins; ties keep the service's order."""
    return max(matches, key=lambda m: m.get("Similarity", 0.0))


class MatchingRun:
    def __init__(
        self,
        stack_info: StackInfo,
        settings: Settings,
        collection: FaceCollection,
        store: ObjectStore,
        users: Optional[UserRegistry] = None,
    ) -> None:
        self.stack_info = stack_info
        self.settings = settings
        self.collection = collection
        self.store = store
        self.users = users or UserRegistry(collection)

    @classmethod
    def from_stack(cls, stack_info: StackInfo, settings: Settings) -> "MatchingRun":
        """Build a run with boto3 clients for ``settings.region_name``."""
        collection = FaceCollection(
            stack_info.collection_id,
            stack_info.bucket_name,
            region_name=settings.region_name,
        )
        store = ObjectStore(stack_info.bucket_name, region_name=settings.region_name)
        return cls(stack_info, settings, collection, store)

    # ------------------------------------------------------------------
    # Outcome handling
    # ------------------------------------------------------------------

    @staticmethod
    def _settle(outcome: Outcome[T]) -> Optional[T]:
        if isinstance(outcome, Fatal):
            outcome.raise_error()
        if isinstance(outcome, Warned):
            logger.warning(outcome.reason)
            return None
        for note in outcome.notes:
            logger.warning(note)
        return outcome.value

    # ------------------------------------------------------------------
    # Reference images
    # ------------------------------------------------------------------

    def index_reference_face(self, key: str) -> Outcome[Tuple[ReferenceImage, IndexedFace]]:
        """Index the largest face of one reference image."""
        try:
            ref = reference_image(key)
            records, skipped = self.collection.index_faces_with_skipped(
                key, self.settings.reference_max_faces
            )
        except FaceMatchError as exc:
            return Fatal(exc)

        if not records:
            return Warned(f"No face found in image {key}")
        notes: Tuple[str, ...] = ()
        over_cap = [f for f in skipped if "EXCEEDS_MAX_FACES" in f.get("Reasons", [])]
        if len(records) > 1 or over_cap:
            notes = (f"More than one face found in image {key}, using the first one",)
        face = IndexedFace(face_id=records[0]["Face"]["FaceId"], source_image=key)
        return Ok((ref, face), notes)

    def associate_user(self, user_id: str, face_ids: List[str]) -> Outcome[List[str]]:
        """Ensure ``user_id`` exists and associate ``face_ids`` with it."""
        try:
            self.users.ensure_user(user_id)
            resp = self.collection.associate_faces(
                user_id, face_ids, self.settings.user_match_threshold
            )
        except FaceMatchError as exc:
            return Fatal(exc)

        associated = [f["FaceId"] for f in resp.get("AssociatedFaces", []) if f.get("FaceId")]
        notes = tuple(
            f"Face {f.get('FaceId')} not associated with user {user_id}: "
            f"{', '.join(f.get('Reasons', [])) or 'no reason given'}"
            for f in resp.get("UnsuccessfulFaceAssociations", [])
        )
        return Ok(associated, notes)

    def index_and_associate_faces(self) -> Dict[str, List[str]]:
        """Index every reference image and attach its face to its user.

        Returns the face ids collected per user, users in discovery order.
        """
        keys = self.store.list_keys(self.settings.reference_prefix)
        logger.info("Found %d reference image(s)", len(keys))

        indexed = []
        for key in keys:
            pair = self._settle(self.index_reference_face(key))
            if pair is not None:
                indexed.append(pair)

        grouped = group_faces_by_user(indexed)
        for user_id, face_ids in grouped.items():
            self._settle(self.associate_user(user_id, face_ids))
            logger.info("Associated %d face(s) with user %s", len(face_ids), user_id)
        return grouped

    # ------------------------------------------------------------------
    # Input images
    # ------------------------------------------------------------------

    def resolve_face(self, face_id: str, image: str) -> Outcome[str]:
        """Resolve one detected face to a user id."""
        try:
            matches = self.collection.search_faces(face_id, self.settings.face_match_threshold)
            if not matches:
                return Warned(f"No match found for face {face_id} (image: {image})")
            matched_face_id = _best(matches)["Face"]["FaceId"]
            user_matches = self.collection.search_users(
                matched_face_id, self.settings.user_match_threshold
            )
        except FaceMatchError as exc:
            return Fatal(exc)

        # The matched face comes from the collection, so a user is expected.
        if not user_matches:
            return Warned(
                f"No user found for face {matched_face_id} matched by face {face_id} "
                f"(image: {image})"
            )
        return Ok(_best(user_matches)["User"]["UserId"])

    def resolve_image(self, key: str) -> Outcome[MatchResult]:
        """Find the known users among the largest faces of ``key``."""
        try:
            records = self.collection.index_faces(key, self.settings.input_max_faces)
        except FaceMatchError as exc:
            return Fatal(exc)
        if not records:
            return Warned(f"No face found on image {key}")

        result = MatchResult(image=key)
        notes: List[str] = []
        for record in records:
            outcome = self.resolve_face(record["Face"]["FaceId"], key)
            if isinstance(outcome, Fatal):
                return outcome
            if isinstance(outcome, Warned):
                notes.append(outcome.reason)
                continue
            result.add(outcome.value)
        return Ok(result, tuple(notes))

    def iter_input_images(self) -> Iterator[MatchResult]:
        """Yield one result per input image as soon as it is resolved."""
        keys = self.store.list_keys(self.settings.input_prefix)
        logger.info("Found %d input image(s)", len(keys))

        for key in keys:
            result = self._settle(self.resolve_image(key))
            yield result if result is not None else MatchResult(image=key)

    def process_input_images(self) -> List[MatchResult]:
        return list(self.iter_input_images())


__all__ = ["MatchingRun"]
