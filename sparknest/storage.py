"""
Storage layer over a SQLAlchemy session.

Write methods commit by default; orchestrators that need several writes to
land together pass ``commit=False`` and call :meth:`DatabaseStorage.commit`
once. Driver failures surface as StorageUnavailable after a rollback, so no
partial state is left pending in the session.
"""

import functools
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .core.database import utcnow
from .core.errors import DuplicateAccount, StorageUnavailable
from .models.note import Note
from .models.otp import OTPRecord
from .models.user import User

logger = logging.getLogger(__name__)


def _guarded(func):
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError:
            logger.exception("Storage operation %s failed", func.__name__)
            self.db.rollback()
            raise StorageUnavailable()
    return wrapper


class DatabaseStorage:
    def __init__(self, db: Session):
        self.db = db

    def _finish(self, commit: bool):
        if commit:
            self.db.commit()
        else:
            self.db.flush()

    @_guarded
    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    # ---------- Accounts ----------

    @_guarded
    def get_account_by_id(self, account_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == account_id).first()

    @_guarded
    def get_account_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    @_guarded
    def get_account_by_google_id(self, google_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.google_id == google_id).first()

    @_guarded
    def create_account(
        self,
        email: str,
        password_hash: Optional[str],
        first_name: str,
        last_name: str,
        google_id: Optional[str] = None,
        commit: bool = True,
    ) -> User:
        """Insert an unverified account. A taken email raises DuplicateAccount."""
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            google_id=google_id,
            is_email_verified=False,
        )
        self.db.add(user)
        try:
            self._finish(commit)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateAccount()
        if commit:
            self.db.refresh(user)
        return user

    @_guarded
    def set_email_verified(self, email: str, verified: bool, commit: bool = True):
        self.db.execute(
            update(User)
            .where(User.email == email)
            .values(is_email_verified=verified, updated_at=utcnow())
        )
        self._finish(commit)

    # ---------- Verification records ----------

    @_guarded
    def create_verification_record(
        self,
        email: str,
        code: str,
        expires_at: datetime,
        pending_password_hash: Optional[str] = None,
        pending_first_name: Optional[str] = None,
        pending_last_name: Optional[str] = None,
    ) -> OTPRecord:
        record = OTPRecord(
            email=email,
            otp_code=code,
            expires_at=expires_at,
            pending_password_hash=pending_password_hash,
            pending_first_name=pending_first_name,
            pending_last_name=pending_last_name,
            used=False,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    @_guarded
    def find_valid_verification_record(self, email: str, code: str, now: Optional[datetime] = None) -> Optional[OTPRecord]:
        """Newest unused record for (email, code) whose expiry is still ahead of ``now``."""
        now = now or utcnow()
        return self.db.query(OTPRecord).filter(
            OTPRecord.email == email,
            OTPRecord.otp_code == code,
            OTPRecord.used == False,  # noqa: E712
            OTPRecord.expires_at > now,
        ).order_by(OTPRecord.created_at.desc(), OTPRecord.id.desc()).first()

    @_guarded
    def mark_verification_record_used(self, record_id: int, commit: bool = True) -> bool:
        """
        Flag a record as consumed.

        Returns True only for the call that flipped it; marking an already
        used record is a no-op that returns False.
        """
        result = self.db.execute(
            update(OTPRecord)
            .where(OTPRecord.id == record_id, OTPRecord.used == False)  # noqa: E712
            .values(used=True)
        )
        self._finish(commit)
        return result.rowcount > 0

    @_guarded
    def purge_expired_verification_records(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        result = self.db.execute(delete(OTPRecord).where(OTPRecord.expires_at < now))
        self.db.commit()
        return result.rowcount

    # ---------- Notes ----------

    @_guarded
    def get_user_notes(self, user_id: str) -> list[Note]:
        return self.db.query(Note).filter(Note.user_id == user_id).order_by(Note.updated_at.desc()).all()

    @_guarded
    def get_note(self, note_id: str, user_id: str) -> Optional[Note]:
        return self.db.query(Note).filter(Note.id == note_id, Note.user_id == user_id).first()

    @_guarded
    def create_note(self, user_id: str, title: str, content: str) -> Note:
        note = Note(user_id=user_id, title=title, content=content)
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    @_guarded
    def update_note(self, note_id: str, user_id: str, **updates) -> Optional[Note]:
        note = self.get_note(note_id, user_id)
        if not note:
            return None
        for field, value in updates.items():
            setattr(note, field, value)
        note.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(note)
        return note

    @_guarded
    def delete_note(self, note_id: str, user_id: str) -> bool:
        result = self.db.execute(delete(Note).where(Note.id == note_id, Note.user_id == user_id))
        self.db.commit()
        return result.rowcount > 0
