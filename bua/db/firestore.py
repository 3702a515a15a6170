import os, json, base64, pathlib
from functools import lru_cache

from google.cloud import firestore
from google.oauth2 import service_account

import firebase_admin
from firebase_admin import initialize_app
from bua.core.config import settings


def init_firebase() -> None:
    """Initialise the default firebase_admin app once (ID-token verification)."""
    if not firebase_admin._apps:
        initialize_app()

@lru_cache(maxsize=1)
def get_db() -> firestore.Client:
    """Create Firestore client once, safely in any env."""
    # 1) Prefer base64 secret if present
    key_b64 = settings.FIREBASE_KEY_B64 or os.getenv("FIREBASE_KEY_B64")
    if key_b64:
        creds = service_account.Credentials.from_service_account_info(
            json.loads(base64.b64decode(key_b64))
        )
        project = settings.GOOGLE_CLOUD_PROJECT or creds.project_id
        return firestore.Client(project=project, credentials=creds)

    # 2) Otherwise use a file path from env or settings
    path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or settings.GOOGLE_APPLICATION_CREDENTIALS
    if path and pathlib.Path(path).exists():
        creds = service_account.Credentials.from_service_account_file(path)
        project = settings.GOOGLE_CLOUD_PROJECT or creds.project_id
        return firestore.Client(project=project, credentials=creds)

    # 3) Fall back to ADC (`gcloud auth application-default login`)
    return firestore.Client()
