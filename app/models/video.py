"""
Video model referenced by watch history, playlists and comments
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DECIMAL, BigInteger, Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow


class Video(Base):
    """Video model with hosted file references."""

    __tablename__ = "videos"

    # Primary key
    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        index=True
    )

    # Hosted files
    video_file: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(1000), nullable=False)

    # Metadata
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    duration: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(10, 2), nullable=True)
    views: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Ownership and relationships
    owner_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Relationships
    owner = relationship("User", back_populates="videos")

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, title='{self.title}', owner_id='{self.owner_id}')>"
