from sqlalchemy import Integer, String, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from ..core.database import Base, utcnow

class OTPRecord(Base):
    __tablename__ = "otp_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    otp_code: Mapped[str] = mapped_column(String(12), nullable=False)
    # Pending profile, held until the code is consumed
    pending_password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pending_first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pending_last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def has_pending_profile(self) -> bool:
        return bool(self.pending_password_hash and self.pending_first_name and self.pending_last_name)
