# danceup/models.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from sqlalchemy.sql import func
from .db import Base


class Account(Base):
    __tablename__ = "accounts"

    uid = Column(String(32), primary_key=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    session_epoch = Column(Integer, nullable=False, default=0)  # bumped on sign-out
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Document(Base):
    __tablename__ = "documents"

    pk = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    id = Column(String(32), unique=True, nullable=False)
    collection = Column(String(64), nullable=False)  # classes | events | workshops | packages | studio_owners
    owner_id = Column(String(32), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_documents_collection_owner", "collection", "owner_id"),
    )
