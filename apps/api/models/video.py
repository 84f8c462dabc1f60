"""Video model for uploaded files and external links."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


VIDEO_KIND_FILE = "file"
VIDEO_KIND_LINK = "link"


class Video(Base):
    """Video owned by exactly one account."""

    __tablename__ = "videos"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    locator = Column(String, nullable=False)  # /uploads/<name> for files, URL for links
    kind = Column(String, nullable=False, default=VIDEO_KIND_FILE)
    owner_id = Column(String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(kind.in_([VIDEO_KIND_FILE, VIDEO_KIND_LINK]), name="check_video_kind"),
    )

    # Relationships
    owner = relationship("Account", back_populates="videos")

    @property
    def is_file(self) -> bool:
        return self.kind == VIDEO_KIND_FILE
