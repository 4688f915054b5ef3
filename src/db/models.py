"""
SQLAlchemy database models for the hybrid retrieval service.
"""
from datetime import datetime

from sqlalchemy import JSON, BigInteger, Column, DateTime, Integer, String, Text

from src.db.postgres import Base


class Journal(Base):
    """
    Bibliographic record of a journal article, keyed by DOI.
    Used to cite passages of the sci corpus.
    """

    __tablename__ = "journals"

    doi = Column(String(255), primary_key=True)
    title = Column(Text, nullable=False)
    authors = Column(JSON, nullable=False, default=list)  # list of author names

    def __repr__(self) -> str:
        return f"<Journal(doi={self.doi}, title={self.title})>"


class FunctionLog(Base):
    """
    One search call, recorded for usage accounting.
    """

    __tablename__ = "function_logs"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    called_at = Column(BigInteger, nullable=False)  # epoch milliseconds
    function_name = Column(String(100), nullable=False, index=True)
    top_k = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<FunctionLog(id={self.id}, email={self.email}, function={self.function_name})>"
