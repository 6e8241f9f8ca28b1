"""
Persistence for resumes and the account records they belong to.

Two backends share the same small interface:

- `FirestoreResumeStore` keeps one document per owner in the `resumes`
  collection (document id = owner id) and reads accounts from `users`.
- `JsonFileResumeStore` keeps everything in one local JSON file, for the CLI
  and for development without Firebase.

Both upsert by owner: the first save creates the record, later saves overwrite
`content` and `updatedAt` and keep `createdAt`.
"""
import json
import logging
import os
import tempfile
from datetime import datetime
from typing import Optional

import firebase_admin
from google.api_core import exceptions as google_exceptions
from firebase_admin import credentials, firestore

from .errors import StoreError
from .models import Account, ResumeDocument

RESUMES_COLLECTION = "resumes"
USERS_COLLECTION = "users"


def init_firebase(credentials_path: Optional[str] = None):
    """Initializes the Firebase Admin SDK once per process."""
    if firebase_admin._apps:
        return
    try:
        if credentials_path:
            cred = credentials.Certificate(credentials_path)
            firebase_admin.initialize_app(cred)
            logging.info(f"Firebase Admin SDK initialized for project {cred.project_id}")
        else:
            firebase_admin.initialize_app()
            logging.info("Firebase Admin SDK initialized with application default credentials")
    except Exception as e:
        logging.error(f"Error initializing Firebase Admin SDK: {e}")
        raise


class ResumeStore:
    """Interface shared by the store backends."""

    def find_by_owner(self, owner_id: str) -> Optional[ResumeDocument]:
        raise NotImplementedError

    def upsert_by_owner(self, owner_id: str, content: str, updated_at: datetime) -> ResumeDocument:
        raise NotImplementedError

    def find_account(self, user_id: str) -> Optional[Account]:
        raise NotImplementedError


class FirestoreResumeStore(ResumeStore):

    def __init__(self, db=None):
        """
        Args:
            db: A Firestore client. Defaults to `firestore.client()` of the
                already-initialized Firebase app.
        """
        self.db = db or firestore.client()

    def find_by_owner(self, owner_id: str) -> Optional[ResumeDocument]:
        try:
            snapshot = self.db.collection(RESUMES_COLLECTION).document(owner_id).get()
        except google_exceptions.GoogleAPICallError as e:
            logging.error(f"Firestore read failed for resume of {owner_id}: {e}")
            raise StoreError() from e
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        return ResumeDocument(
            owner_id=owner_id,
            content=data.get("content", ""),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt") or data.get("createdAt"),
        )

    def upsert_by_owner(self, owner_id: str, content: str, updated_at: datetime) -> ResumeDocument:
        ref = self.db.collection(RESUMES_COLLECTION).document(owner_id)
        try:
            snapshot = ref.get()
            created_at = (snapshot.to_dict() or {}).get("createdAt") if snapshot.exists else None
            payload = {
                "userId": owner_id,
                "content": content,
                "updatedAt": updated_at,
                "createdAt": created_at or updated_at,
            }
            ref.set(payload)
        except google_exceptions.GoogleAPICallError as e:
            logging.error(f"Firestore write failed for resume of {owner_id}: {e}")
            raise StoreError() from e
        return ResumeDocument(
            owner_id=owner_id,
            content=content,
            created_at=payload["createdAt"],
            updated_at=updated_at,
        )

    def find_account(self, user_id: str) -> Optional[Account]:
        try:
            snapshot = self.db.collection(USERS_COLLECTION).document(user_id).get()
        except google_exceptions.GoogleAPICallError as e:
            logging.error(f"Firestore read failed for account {user_id}: {e}")
            raise StoreError() from e
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        return Account(
            id=user_id,
            name=data.get("name"),
            email=data.get("email"),
            industry=data.get("industry"),
        )


class JsonFileResumeStore(ResumeStore):
    """
    Single-file store: {"accounts": {id: {...}}, "resumes": {owner_id: {...}}}.

    Writes go to a temporary file in the same directory which then replaces the
    original, so a failed write never leaves a truncated store behind.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {"accounts": {}, "resumes": {}}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logging.error(f"Could not read resume store {self.path}: {e}")
            raise StoreError() from e
        data.setdefault("accounts", {})
        data.setdefault("resumes", {})
        return data

    def _write(self, data: dict):
        directory = os.path.dirname(os.path.abspath(self.path))
        temp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".resumes-", suffix=".json")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Could not write resume store {self.path}: {e}")
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            raise StoreError() from e

    def find_by_owner(self, owner_id: str) -> Optional[ResumeDocument]:
        record = self._read()["resumes"].get(owner_id)
        if record is None:
            return None
        return ResumeDocument.model_validate(record)

    def upsert_by_owner(self, owner_id: str, content: str, updated_at: datetime) -> ResumeDocument:
        data = self._read()
        existing = data["resumes"].get(owner_id) or {}
        document = ResumeDocument(
            owner_id=owner_id,
            content=content,
            created_at=existing.get("createdAt") or updated_at,
            updated_at=updated_at,
        )
        data["resumes"][owner_id] = document.model_dump(mode="json", by_alias=True)
        self._write(data)
        return document

    def find_account(self, user_id: str) -> Optional[Account]:
        record = self._read()["accounts"].get(user_id)
        if record is None:
            return None
        return Account.model_validate({**record, "id": user_id})

    def save_account(self, account: Account) -> Account:
        """Creates or replaces a local account record."""
        data = self._read()
        data["accounts"][account.id] = account.model_dump(mode="json", by_alias=True, exclude_none=True)
        self._write(data)
        logging.info(f"Saved local account {account.id}")
        return account
