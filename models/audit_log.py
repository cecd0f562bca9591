from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from config.database import Base


class AuditLog(Base):
    """
    Trilha de auditoria das operações de caixa.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    user_id = Column(Integer, nullable=True)
    user_name = Column(String(100), nullable=False, default="Sistema")
    action = Column(String(50), nullable=False, index=True)
    details = Column(Text, nullable=True)
