"""
SQLAlchemy models for the strain analysis API.
"""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    credential = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    workflows = relationship(
        "Workflow",
        back_populates="user",
        order_by="Workflow.id",
        cascade="all, delete-orphan",
    )


class Workflow(Base):
    __tablename__ = "workflows"
    __table_args__ = (UniqueConstraint("user_id", "workflow_id", name="uq_workflows_user_workflow"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workflow_id = Column(Text, nullable=False)
    submitted = Column(DateTime(timezone=True), nullable=False)
    finished = Column(DateTime(timezone=True))
    algorithm = Column(Text, nullable=False)
    species = Column(Text)
    project_id = Column(Text)
    sample_name = Column(Text)
    single = Column(Boolean)
    status = Column(Text, nullable=False, default="Submitted")

    user = relationship("User", back_populates="workflows")
