"""Website model - a monitored site identified by its alias."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from uptime_monitor.database.base import Base
from uptime_monitor.utils.timeutils import utcnow


class Website(Base):
    """
    Website registered for periodic probing.

    Attributes:
        id: Surrogate primary key
        url: Absolute URL probed with GET
        alias: Unique external identifier
        created_at: Registration timestamp
        logs: Probe results recorded for this site
    """

    __tablename__ = "websites"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(2048), nullable=False)
    alias = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Deletion goes through SiteRegistry.delete_site, which removes logs explicitly
    logs = relationship("Log", back_populates="website", passive_deletes=True)

    def __repr__(self) -> str:
        """String representation of website."""
        return f"<Website(id={self.id}, alias='{self.alias}', url='{self.url}')>"
