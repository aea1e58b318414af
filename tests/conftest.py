from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, Dict, List, Optional, Set

import pytest
from botocore.exceptions import ClientError

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from facematch.config import Settings
from facematch.pipeline import MatchingRun
from facematch.rekognition import FaceCollection
from facematch.schema import StackInfo
from facematch.storage import ObjectStore

BUCKET = "facematch-images-1234"
COLLECTION = "facematch-people"


def client_error(operation: str, code: str = "InternalServerError") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class FakeS3:
    """Answers list_objects_v2 from a static key list, ``page_size`` keys per page."""

    def __init__(self, keys: List[str], page_size: int = 1000) -> None:
        self.keys = list(keys)
        self.page_size = page_size
        self.calls: List[Dict[str, Any]] = []
        self.uploads: List[tuple] = []
        self.fail_list = False

    def list_objects_v2(self, **params):
        self.calls.append(params)
        if self.fail_list:
            raise client_error("ListObjectsV2", "AccessDenied")
        matching = [k for k in self.keys if k.startswith(params["Prefix"])]
        start = int(params.get("ContinuationToken") or 0)
        page = matching[start : start + self.page_size]
        resp: Dict[str, Any] = {"KeyCount": len(page), "IsTruncated": False}
        if page:
            resp["Contents"] = [{"Key": k, "Size": 100} for k in page]
        if start + self.page_size < len(matching):
            resp["IsTruncated"] = True
            resp["NextContinuationToken"] = str(start + self.page_size)
        return resp

    def upload_file(self, filename, bucket, key):
        self.uploads.append((filename, bucket, key))


class FakeRekognition:
    """In-memory stand-in for the boto3 rekognition client.

    ``faces_by_image`` maps an S3 key to the face ids IndexFaces returns for it
    (largest first). ``matches`` maps a detected face id to the reference face
    ids SearchFaces finds for it, and ``users_by_face`` is the association
    SearchUsers answers from; AssociateFaces fills it in.
    """

    def __init__(
        self,
        faces_by_image: Optional[Dict[str, List[str]]] = None,
        matches: Optional[Dict[str, List[str]]] = None,
        existing_users: Optional[List[str]] = None,
    ) -> None:
        self.faces_by_image = faces_by_image or {}
        self.matches = matches or {}
        self.users: Set[str] = set(existing_users or [])
        self.users_by_face: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.fail: Set[str] = set()
        self.users_page_size = 100
        self.honour_max_faces = True

    def _record(self, name: str, params: Dict[str, Any]) -> None:
        self.calls.append((name, params))
        if name in self.fail:
            raise client_error(name)

    def called(self, name: str) -> List[Dict[str, Any]]:
        return [params for op, params in self.calls if op == name]

    def index_faces(self, **params):
        self._record("IndexFaces", params)
        key = params["Image"]["S3Object"]["Name"]
        face_ids = self.faces_by_image.get(key, [])
        kept = face_ids[: params["MaxFaces"]] if self.honour_max_faces else face_ids
        records = [
            {
                "Face": {"FaceId": fid, "ImageId": f"img-{key}", "Confidence": 99.9},
                "FaceDetail": {"Confidence": 99.9},
            }
            for fid in kept
        ]
        unindexed = [
            {"Reasons": ["EXCEEDS_MAX_FACES"], "FaceDetail": {"Confidence": 99.0}}
            for _ in face_ids[len(kept) :]
        ]
        return {"FaceRecords": records, "UnindexedFaces": unindexed}

    def search_faces(self, **params):
        self._record("SearchFaces", params)
        found = self.matches.get(params["FaceId"], [])
        return {
            "SearchedFaceId": params["FaceId"],
            "FaceMatches": [
                {"Similarity": 99.0 - i, "Face": {"FaceId": fid}} for i, fid in enumerate(found)
            ],
        }

    def search_users(self, **params):
        self._record("SearchUsers", params)
        user_id = self.users_by_face.get(params["FaceId"])
        matches = []
        if user_id:
            matches.append(
                {"Similarity": 99.5, "User": {"UserId": user_id, "UserStatus": "ACTIVE"}}
            )
        return {"UserMatches": matches, "SearchedFace": {"FaceId": params["FaceId"]}}

    def create_user(self, **params):
        self._record("CreateUser", params)
        self.users.add(params["UserId"])
        return {}

    def associate_faces(self, **params):
        self._record("AssociateFaces", params)
        for fid in params["FaceIds"]:
            self.users_by_face[fid] = params["UserId"]
        return {
            "AssociatedFaces": [{"FaceId": fid} for fid in params["FaceIds"]],
            "UnsuccessfulFaceAssociations": [],
            "UserStatus": "UPDATING",
        }

    def list_users(self, **params):
        self._record("ListUsers", params)
        ordered = sorted(self.users)
        start = int(params.get("NextToken") or 0)
        page = ordered[start : start + self.users_page_size]
        resp: Dict[str, Any] = {"Users": [{"UserId": u, "UserStatus": "ACTIVE"} for u in page]}
        if start + self.users_page_size < len(ordered):
            resp["NextToken"] = str(start + self.users_page_size)
        return resp


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def stack_info() -> StackInfo:
    return StackInfo(bucket_name=BUCKET, collection_id=COLLECTION)


@pytest.fixture
def make_run(settings: Settings, stack_info: StackInfo):
    def _make(rekognition: FakeRekognition, s3: FakeS3) -> MatchingRun:
        collection = FaceCollection(COLLECTION, BUCKET, client=rekognition)
        store = ObjectStore(BUCKET, client=s3)
        return MatchingRun(stack_info, settings, collection, store)

    return _make
