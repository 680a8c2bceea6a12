"""Log model - one HTTP status observed by a probe."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, SmallInteger
from sqlalchemy.orm import relationship

from uptime_monitor.database.base import Base
from uptime_monitor.utils.timeutils import utcnow


class Log(Base):
    """
    Append-only probe result.

    Attributes:
        id: Primary key
        website_id: Foreign key to the probed website
        status: HTTP status code of the response
        created_at: Time the result was recorded (naive UTC)
    """

    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    website_id = Column(
        Integer,
        ForeignKey("websites.id"),
        nullable=False,
        index=True
    )
    status = Column(SmallInteger, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    website = relationship("Website", back_populates="logs")

    def __repr__(self) -> str:
        """String representation of log entry."""
        return (
            f"<Log(id={self.id}, website_id={self.website_id}, "
            f"status={self.status}, created_at={self.created_at})>"
        )
