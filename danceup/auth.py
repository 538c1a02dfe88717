"""
auth.py – Owner accounts & sessions
────────────────────────────────────────────
Sign-up / sign-in / sign-out for studio owners.

Sessions are explicit OwnerSession objects handed to whatever needs the
owner's identity (editors, schedule feed); nothing looks identity up from
ambient state. Tokens are itsdangerous timed signatures over
{uid, email, epoch}; sign-out bumps the account's epoch, which voids
every token issued before it.
────────────────────────────────────────────
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from . import config
from .blobs import BlobStore, ImageUpload, studio_image_path, validate_image
from .db import get_session
from .entities import US_STATES
from .errors import AuthError, DanceUpError, StoreError, ValidationError
from .models import Account
from .store import STUDIO_OWNERS, DocumentStore

log = logging.getLogger(__name__)

PROFILE_REQUIRED = ("first_name", "last_name", "address1", "city", "state", "zip_code", "studio_name")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class OwnerSession:
    uid: str
    email: str
    token: str = ""

    @property
    def display_name(self) -> str:
        return self.email.split("@")[0]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _field(form: Dict[str, Any], key: str) -> str:
    v = form.get(key)
    return "" if v is None else str(v).strip()


def profile_document(uid: str, email: str, form: Dict[str, Any], image_url: str = "") -> Dict[str, Any]:
    """Map sign-up / studio form fields onto the studio_owners document shape."""
    get = lambda k: _field(form, k)
    social = form.get("social_media") if isinstance(form.get("social_media"), dict) else {}
    return {
        "uid": uid,
        "email": email,
        "first_name": get("first_name"),
        "last_name": get("last_name"),
        "address1": get("address1"),
        "address2": get("address2"),
        "city": get("city"),
        "state": get("state").upper(),
        "zip_code": get("zip_code"),
        "studio_name": get("studio_name"),
        "studio_image_url": image_url,
        "website": get("website"),
        "social_media": {
            "facebook": str(social.get("facebook") or get("facebook")).strip(),
            "instagram": str(social.get("instagram") or get("instagram")).strip(),
            "tiktok": str(social.get("tiktok") or get("tiktok")).strip(),
        },
    }


def check_profile_fields(form: Dict[str, Any]) -> None:
    if any(not str(form.get(k) or "").strip() for k in PROFILE_REQUIRED):
        raise ValidationError("Please fill in all required fields")
    if str(form.get("state")).strip().upper() not in US_STATES:
        raise ValidationError("Please select a valid state")


class AuthService:
    def __init__(
        self,
        store: DocumentStore,
        blobs: BlobStore,
        secret_key: str = None,
        max_age: int = None,
        password_min_length: int = None,
        max_image_bytes: int = None,
    ):
        self.store = store
        self.blobs = blobs
        self.secret_key = secret_key or config.SECRET_KEY
        self.max_age = max_age or config.SESSION_MAX_AGE
        self.password_min_length = password_min_length or config.PASSWORD_MIN_LENGTH
        self.max_image_bytes = max_image_bytes or config.MAX_IMAGE_BYTES

    # ── Tokens ───────────────────────────────────
    def _serializer(self):
        return URLSafeTimedSerializer(self.secret_key, salt=config.SESSION_SALT)

    def _issue(self, account: Account) -> OwnerSession:
        token = self._serializer().dumps(
            {"uid": account.uid, "email": account.email, "epoch": account.session_epoch}
        )
        return OwnerSession(uid=account.uid, email=account.email, token=token)

    def session_from_token(self, token: str) -> OwnerSession:
        """Resolve a token to a live session or raise AuthError."""
        if not token:
            raise AuthError("Not signed in")
        try:
            data = self._serializer().loads(token, max_age=self.max_age)
        except SignatureExpired:
            raise AuthError("Session expired, please sign in again")
        except BadSignature:
            raise AuthError("Invalid session")

        with get_session() as s:
            account = s.get(Account, data.get("uid"))
            if account is None or account.session_epoch != data.get("epoch"):
                raise AuthError("Session no longer valid, please sign in again")
            return OwnerSession(uid=account.uid, email=account.email, token=token)

    # ── Sign up ──────────────────────────────────
    def sign_up(
        self,
        email: str,
        password: str,
        confirm_password: str,
        profile: Dict[str, Any],
        image: Optional[ImageUpload] = None,
    ) -> OwnerSession:
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Please fill in all required fields")
        if not _EMAIL.match(email):
            raise AuthError("Please enter a valid email address")
        check_profile_fields(profile)
        if password != confirm_password:
            raise AuthError("Passwords do not match")
        if len(password) < self.password_min_length:
            raise AuthError(f"Password must be at least {self.password_min_length} characters")
        if image is not None:
            validate_image(image, self.max_image_bytes)

        uid = uuid.uuid4().hex
        try:
            with get_session() as s:
                taken = s.execute(select(Account.uid).where(func.lower(Account.email) == email)).first()
                if taken:
                    raise AuthError("Email already in use")
                s.add(Account(uid=uid, email=email, password_hash=generate_password_hash(password), session_epoch=0))
        except IntegrityError:
            raise AuthError("Email already in use")
        except SQLAlchemyError as e:
            log.error(f"❌ Account creation failed for {email}: {e}")
            raise StoreError("Could not create account") from e

        image_url = ""
        if image is not None:
            try:
                image_url = self.blobs.write(studio_image_path(uid), image.data)
            except DanceUpError as e:
                # registration continues without the picture
                log.error(f"⚠️ Studio image upload failed for {uid}: {e}")

        doc = profile_document(uid, email, profile, image_url)
        doc.update(access_level="studio_owner", created_at=_now_iso(), updated_at=_now_iso())
        try:
            self.store.set(STUDIO_OWNERS, uid, uid, doc)
        except DanceUpError:
            # an account without a profile would block this email for good
            self._discard_account(uid, image_url)
            raise

        log.info(f"✅ Registered studio owner {email} ({uid})")
        with get_session() as s:
            return self._issue(s.get(Account, uid))

    def _discard_account(self, uid: str, image_url: str) -> None:
        try:
            with get_session() as s:
                account = s.get(Account, uid)
                if account is not None:
                    s.delete(account)
        except SQLAlchemyError as e:
            log.error(f"❌ Could not roll back account {uid}: {e}")
        if image_url:
            try:
                self.blobs.delete_url(image_url)
            except DanceUpError as e:
                log.error(f"⚠️ Could not delete studio image for {uid}: {e}")
        log.warning(f"⚠️ Sign-up for {uid} rolled back, profile was not saved")

    # ── Sign in / out ────────────────────────────
    def sign_in(self, email: str, password: str) -> OwnerSession:
        email = (email or "").strip().lower()
        with get_session() as s:
            account = s.execute(
                select(Account).where(func.lower(Account.email) == email)
            ).scalars().first()
            if account is None or not check_password_hash(account.password_hash, password or ""):
                log.warning(f"⚠️ Failed sign-in for {email or '<blank>'}")
                raise AuthError("Invalid email or password")
            log.info(f"[AUTH] signed in {email}")
            return self._issue(account)

    def sign_out(self, session: OwnerSession) -> None:
        with get_session() as s:
            account = s.get(Account, session.uid)
            if account is not None:
                account.session_epoch = (account.session_epoch or 0) + 1
        log.info(f"[AUTH] signed out {session.email}")
