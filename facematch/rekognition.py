"""Amazon Rekognition face collection helpers.

Every method issues exactly one request (or one per page for listings).
Empty results are returned as empty lists; call failures are raised as
:class:`~facematch.errors.RekognitionError`.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import RekognitionError


@contextmanager
def _wrap(operation: str, context: str) -> Iterator[None]:
    try:
        yield
    except (BotoCoreError, ClientError) as exc:
        raise RekognitionError(operation, f"{exc} ({context})") from exc


class FaceCollection:
    """Operations against one collection whose images live in one bucket."""

    def __init__(
        self,
        collection_id: str,
        bucket: str,
        client=None,
        region_name: Optional[str] = None,
    ) -> None:
        self._collection_id = collection_id
        self._bucket = bucket
        self._rekognition = client or boto3.client("rekognition", region_name=region_name)

    @property
    def collection_id(self) -> str:
        return self._collection_id

    def index_faces_with_skipped(
        self, key: str, max_faces: int
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """Index up to ``max_faces`` faces in ``key``.

        Returns ``(FaceRecords, UnindexedFaces)``; faces beyond the cap are
        reported in the second list with reason ``EXCEEDS_MAX_FACES``.
        """
        with _wrap("IndexFaces", f"image: {key}"):
            resp = self._rekognition.index_faces(
                CollectionId=self._collection_id,
                Image={"S3Object": {"Bucket": self._bucket, "Name": key}},
                MaxFaces=max_faces,
            )
        return resp.get("FaceRecords", []), resp.get("UnindexedFaces", [])

    def index_faces(self, key: str, max_faces: int) -> List[Dict[str, Any]]:
        """Index up to ``max_faces`` of the largest faces in ``key``."""
        return self.index_faces_with_skipped(key, max_faces)[0]

    def search_faces(self, face_id: str, threshold: float) -> List[Dict[str, Any]]:
        """Return indexed faces similar to ``face_id``, best match first."""
        with _wrap("SearchFaces", f"face: {face_id}"):
            resp = self._rekognition.search_faces(
                CollectionId=self._collection_id,
                FaceId=face_id,
                FaceMatchThreshold=threshold,
            )
        return resp.get("FaceMatches", [])

    def search_users(self, face_id: str, threshold: float) -> List[Dict[str, Any]]:
        """Return users associated with faces like ``face_id``, best match first."""
        with _wrap("SearchUsers", f"face: {face_id}"):
            resp = self._rekognition.search_users(
                CollectionId=self._collection_id,
                FaceId=face_id,
                UserMatchThreshold=threshold,
            )
        return resp.get("UserMatches", [])

    def create_user(self, user_id: str) -> None:
        with _wrap("CreateUser", f"user: {user_id}"):
            self._rekognition.create_user(CollectionId=self._collection_id, UserId=user_id)

    def associate_faces(self, user_id: str, face_ids: List[str], threshold: float) -> Dict[str, Any]:
        with _wrap("AssociateFaces", f"user: {user_id}"):
            return self._rekognition.associate_faces(
                CollectionId=self._collection_id,
                UserId=user_id,
                FaceIds=face_ids,
                UserMatchThreshold=threshold,
            )

    def list_user_ids(self) -> List[str]:
        """Return the ids of every user in the collection."""
        user_ids: List[str] = []
        token: Optional[str] = None
        with _wrap("ListUsers", f"collection: {self._collection_id}"):
            while True:
                if token:
                    resp = self._rekognition.list_users(
                        CollectionId=self._collection_id, NextToken=token
                    )
                else:
                    resp = self._rekognition.list_users(CollectionId=self._collection_id)
                for user in resp.get("Users", []):
                    uid = user.get("UserId")
                    if uid:
                        user_ids.append(uid)
                token = resp.get("NextToken")
                if not token:
                    break
        return user_ids


__all__ = ["FaceCollection"]
