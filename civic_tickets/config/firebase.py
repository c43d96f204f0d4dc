"""
Firebase Firestore initialization.
Single Firestore client for the Firestore-backed ticket store.
"""

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app

from civic_tickets.core.settings import settings

logger = logging.getLogger(__name__)

db: Optional[firestore.Client] = None

REQUIRED_CREDENTIAL_FIELDS = ["type", "project_id", "private_key", "client_email"]


def _validate_credentials_file(cred_path: str) -> None:
    if not os.path.exists(cred_path):
        raise RuntimeError(
            f"Firebase credentials file not found: {cred_path}\n"
            f"Check FIREBASE_CREDENTIALS_PATH in your .env file."
        )
    try:
        with open(cred_path, "r", encoding="utf-8") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Firebase credentials file is not valid JSON: {e}") from e

    missing_fields = [field for field in REQUIRED_CREDENTIAL_FIELDS if field not in cred_data]
    if missing_fields:
        raise RuntimeError(
            f"Firebase credentials file is missing required fields: {missing_fields}\n"
            f"Download a fresh service account key from Firebase Console."
        )
    logger.info(f"[FIRESTORE] Credentials file validated: {cred_path} (project {cred_data.get('project_id')})")


def initialize_firestore() -> firestore.Client:
    global db

    if db is not None:
        return db

    if not firebase_admin._apps:
        options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
        if settings.FIREBASE_CREDENTIALS_PATH:
            _validate_credentials_file(settings.FIREBASE_CREDENTIALS_PATH)
            initialize_app(credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH), options)
            logger.info("[FIRESTORE] Firebase Admin SDK initialized with service account")
        else:
            logger.info("[FIRESTORE] No credentials path set, using Application Default Credentials")
            initialize_app(options=options)

    db = firestore.client()
    logger.info(f"[FIRESTORE] Project: {settings.FIREBASE_PROJECT_ID or 'default'}")
    return db


def get_db() -> firestore.Client:
    """
    Get the initialized Firestore client, initializing on first use.
    """
    if db is None:
        return initialize_firestore()
    return db
