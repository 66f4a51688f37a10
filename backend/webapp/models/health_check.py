"""Health check record written on every /healthz probe."""
from sqlalchemy import Column, Integer, DateTime
from webapp.database import Base
from webapp.utils.clock import utc_now


class HealthCheck(Base):
    __tablename__ = "health_checks"

    check_id = Column(Integer, primary_key=True, autoincrement=True)
    check_datetime = Column(DateTime(timezone=True), default=utc_now, nullable=False)
