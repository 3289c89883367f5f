import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)


class FirestoreNotConfigured(RuntimeError):
    pass


def _ensure_firebase_initialized(project_id: Optional[str] = None, credentials_json: Optional[str] = None) -> None:
    if firebase_admin._apps:
        return

    options = {"projectId": project_id} if project_id else None
    creds_json: Optional[str] = (
        credentials_json
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    )

    logger.info(
        "🔍 [Firebase] Initializing | project_id=%s credentials_set=%s", project_id, bool(creds_json)
    )

    if creds_json and creds_json.strip().startswith("{"):
        cred = credentials.Certificate(json.loads(creds_json))
        firebase_admin.initialize_app(cred, options=options)
        logger.info("✅ [Firebase] App initialized (inline JSON)")
    elif creds_json and os.path.exists(creds_json):
        cred = credentials.Certificate(creds_json)
        firebase_admin.initialize_app(cred, options=options)
        logger.info("✅ [Firebase] App initialized (file %s)", creds_json)
    elif creds_json:
        raise FirestoreNotConfigured(f"Firebase credentials file not found: {creds_json}")
    else:
        # Application default credentials (Cloud Run / GCE metadata server)
        firebase_admin.initialize_app(options=options)
        logger.info("✅ [Firebase] App initialized (application default credentials)")


def get_firestore(project_id: Optional[str] = None, credentials_json: Optional[str] = None) -> firestore.Client:
    """credentials_json is a file path or inline service-account JSON."""
    _ensure_firebase_initialized(project_id, credentials_json)
    return firestore.client()
