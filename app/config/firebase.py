"""
Firebase initialization.
Single-source-of-truth Firestore client and Storage bucket for Noise Report Hub.
"""

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app, storage

from app.core.settings import settings

logger = logging.getLogger(__name__)

db: Optional[firestore.Client] = None


def _initialize_app() -> None:
    """Initialize the default firebase_admin app once."""
    if firebase_admin._apps:
        return

    options = {}
    if settings.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = settings.FIREBASE_STORAGE_BUCKET
    if settings.FIREBASE_PROJECT_ID:
        options["projectId"] = settings.FIREBASE_PROJECT_ID

    if settings.FIREBASE_CREDENTIALS_PATH:
        cred_path = settings.FIREBASE_CREDENTIALS_PATH

        if not os.path.exists(cred_path):
            raise FileNotFoundError(
                f"Firebase credentials file not found: {cred_path}\n"
                f"Please check your .env file and ensure FIREBASE_CREDENTIALS_PATH is correct.\n"
                f"Current working directory: {os.getcwd()}"
            )

        try:
            with open(cred_path, "r") as f:
                cred_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Firebase credentials file is not valid JSON: {e}\n"
                f"Please check the file at: {cred_path}"
            )

        required_fields = ["type", "project_id", "private_key", "client_email"]
        missing_fields = [field for field in required_fields if field not in cred_data]
        if missing_fields:
            raise ValueError(
                f"Firebase credentials file is missing required fields: {missing_fields}\n"
                f"Please download a fresh service account key from Firebase Console."
            )

        logger.info(f"[FIREBASE] Credentials file validated: {cred_path}")
        initialize_app(credentials.Certificate(cred_path), options or None)
        logger.info("[FIREBASE] Admin SDK initialized with service account")
    else:
        logger.info("[FIREBASE] No credentials path set, using Application Default Credentials")
        initialize_app(options=options or None)


def initialize_firestore():
    global db

    if db is not None:
        return db

    if settings.USE_MOCK_DB:
        from app.config.mock_firestore import get_mock_db
        db = get_mock_db(settings.MOCK_DB_PATH)
        logger.info("[FIRESTORE] USING MOCK DATABASE")
        return db

    try:
        _initialize_app()
        db = firestore.client()
        logger.info(f"[FIRESTORE] USING REAL FIRESTORE DATABASE (project: {settings.FIREBASE_PROJECT_ID or 'default'})")
        return db

    except FileNotFoundError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Credentials file not found.\n"
            f"{str(e)}\n"
            f"SOLUTION: Check your .env file and ensure FIREBASE_CREDENTIALS_PATH points to a valid service account JSON file."
        )
    except ValueError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Invalid credentials file.\n"
            f"{str(e)}\n"
            f"SOLUTION: Download a fresh service account key from Firebase Console:\n"
            f"1. Go to Firebase Console > Project Settings > Service Accounts\n"
            f"2. Click 'Generate New Private Key'\n"
            f"3. Save the JSON file and update FIREBASE_CREDENTIALS_PATH in .env"
        )
    except Exception as e:
        raise RuntimeError(
            f"Firestore initialization FAILED. Error: {e}\n"
            f"Please check your Firebase credentials and configuration."
        )


def get_db():
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore has not been initialized and cannot be.
    """
    if db is None:
        try:
            initialize_firestore()
        except Exception as e:
            raise RuntimeError(
                f"Firestore not initialized and initialization failed: {e}. "
                "Please check your Firebase credentials and configuration."
            )
    return db


def get_bucket():
    """Get the default Firebase Storage bucket (FIREBASE_STORAGE_BUCKET)."""
    if not settings.FIREBASE_STORAGE_BUCKET:
        raise RuntimeError("FIREBASE_STORAGE_BUCKET is not configured")
    _initialize_app()
    return storage.bucket()
