"""
Declarative base and shared columns for the Podi Tracker models.

Every table gets an integer primary key, a UUID for exports and created/
updated timestamps. Services hand model data to callers as plain dicts
through to_dict().
"""

import uuid as uuid_lib
from datetime import date, datetime
from typing import Any, Dict, Tuple

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base

from src.utils.datetime_utils import utc_now

Base = declarative_base()


def _new_uuid() -> str:
    return str(uuid_lib.uuid4())


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class BaseModel(Base):
    """
    Abstract parent of all models.

    Subclasses list computed properties in DERIVED_FIELDS to have them
    included in to_dict() alongside the columns.
    """

    __abstract__ = True

    PROTECTED_FIELDS: Tuple[str, ...] = ("id", "uuid", "created_at", "updated_at")
    DERIVED_FIELDS: Tuple[str, ...] = ()

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False, default=_new_uuid, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """
        Column values plus DERIVED_FIELDS.

        Dates and datetimes become ISO strings; Decimal values are kept.
        """
        result = {column.name: _plain(getattr(self, column.name)) for column in self.__table__.columns}
        for field_name in self.DERIVED_FIELDS:
            result[field_name] = _plain(getattr(self, field_name))
        return result

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Set the columns named in data, except PROTECTED_FIELDS, and touch updated_at."""
        for column in self.__table__.columns:
            if column.name in data and column.name not in self.PROTECTED_FIELDS:
                setattr(self, column.name, data[column.name])

        self.updated_at = utc_now()

    def __repr__(self) -> str:
        label = getattr(self, "name", None)
        if label is None:
            return f"{type(self).__name__}(id={self.id})"
        return f"{type(self).__name__}(id={self.id}, name='{label}')"
