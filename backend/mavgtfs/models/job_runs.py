import uuid
from sqlalchemy import JSON, Column, Date, DateTime, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from mavgtfs.core.db import Base

class JobRun(Base):
    """One feed build. `meta` holds the CLI args and, once finished, the stage counts or the error."""
    __tablename__ = "job_runs"

    run_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    job_name = Column(Text, nullable=False, index=True)
    window_start = Column(Date, nullable=True)
    window_end = Column(Date, nullable=True)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(Text, nullable=False, default="running")
    meta = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
