# backend/models/report.py
from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from database import Base
from models.enums import ReportType, Severity, ReportStatus

# Represents an incident submitted by a user (fire, flood, ...)
class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(50), nullable=False, default=ReportType.OTHER.value, index=True)
    description = Column(Text, nullable=False)
    severity = Column(String(20), nullable=False, default=Severity.MEDIUM.value, index=True)

    # Location of the incident
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String, nullable=True)

    images = Column(JSON, nullable=False, default=list) # List of image URLs
    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)

    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    admin_notes = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    reporter = relationship("User", foreign_keys=[reporter_id])
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    comments = relationship(
        "ReportComment",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ReportComment.id",
    )

# A free-text comment attached to a report
class ReportComment(Base):
    __tablename__ = "report_comments"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    report = relationship("Report", back_populates="comments")
    author = relationship("User")
