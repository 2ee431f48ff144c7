"""Refresh token model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from bookstore.database import Base


class RefreshToken(Base):
    """A refresh token issued to a user on one device.

    Each login adds a row; logout removes rows by token or by device so a
    user can sign out of one device without touching the others.
    """

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token = Column(String(512), unique=True, nullable=False, index=True)
    device = Column(String(255), nullable=False, default="Unknown Device")
    ip = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")
