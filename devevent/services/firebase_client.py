"""
Firebase initialization for the Firestore event store
"""

from __future__ import annotations

import base64
import json
import os
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from devevent.core.config import Settings

APP_NAME = "devevent"


def load_credentials_info(settings: Settings) -> dict[str, Any]:
    """Read the service-account JSON from the first configured source.

    Sources, in order: FIREBASE_CREDENTIALS_JSON, FIREBASE_CREDENTIALS_B64, FIREBASE_CREDENTIALS_FILE.
    """
    if settings.FIREBASE_CREDENTIALS_JSON:
        return json.loads(settings.FIREBASE_CREDENTIALS_JSON)
    if settings.FIREBASE_CREDENTIALS_B64:
        return json.loads(base64.b64decode(settings.FIREBASE_CREDENTIALS_B64).decode("utf-8"))
    if settings.FIREBASE_CREDENTIALS_FILE and os.path.exists(settings.FIREBASE_CREDENTIALS_FILE):
        with open(settings.FIREBASE_CREDENTIALS_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    raise RuntimeError(
        "Firebase credentials not provided. Set FIREBASE_CREDENTIALS_FILE, "
        "FIREBASE_CREDENTIALS_JSON, or FIREBASE_CREDENTIALS_B64"
    )


def open_firestore_client(settings: Settings):
    """Initialize the Firebase app (once per process) and return a Firestore client"""
    try:
        app = firebase_admin.get_app(APP_NAME)
    except ValueError:
        cred = credentials.Certificate(load_credentials_info(settings))
        app = firebase_admin.initialize_app(cred, name=APP_NAME)
    return firestore.client(app)
