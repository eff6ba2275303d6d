"""Firebase client factory for chatsweep.

The host owns the Firebase app; adapters only receive the Firestore client
and the storage bucket built here.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv


def build_firebase_clients(
    credentials_path: Optional[str] = None,
    bucket_name: Optional[str] = None,
) -> tuple[Any, Any]:
    """Initialize firebase-admin and return (firestore_client, bucket).

    Credentials come from GOOGLE_APPLICATION_CREDENTIALS (read via
    python-dotenv) unless an explicit path is configured.
    """

    import firebase_admin
    from firebase_admin import credentials, firestore, storage

    load_dotenv()

    credentials_path = credentials_path or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    bucket_name = bucket_name or os.getenv("FIREBASE_STORAGE_BUCKET")

    # Fail fast on a missing bucket; the default bucket cannot be guessed.
    if not bucket_name:
        raise RuntimeError("Missing FIREBASE_STORAGE_BUCKET (or firebase.storage_bucket in config.json)")

    if credentials_path:
        cred = credentials.Certificate(credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    logging.getLogger(__name__).info("Initializing Firebase app for bucket %s", bucket_name)

    try:
        app = firebase_admin.get_app()
    except ValueError:
        app = firebase_admin.initialize_app(cred, {"storageBucket": bucket_name})

    return firestore.client(app), storage.bucket(app=app)
