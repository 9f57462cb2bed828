"""Record store contract and its SQLAlchemy implementation"""
from airdealer.store.base import Record, RecordStore
from airdealer.store.sqlalchemy_store import SQLAlchemyRecordStore

__all__ = ["Record", "RecordStore", "SQLAlchemyRecordStore"]
