"""
Module: stock_kernel.db.base
Responsibility: Declarative base class for the local cache ORM models and the
    type annotation map that keeps column types consistent.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from models/, services/, selectors/ or domain/.

Invariants enforced:
    - Timestamps are always timezone-aware (datetime -> DateTime(timezone=True)).
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all local cache models.

    Guarantees:
        - datetime maps to DateTime(timezone=True).
        - str maps to Text (cache values hold whole JSON documents).
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        str: Text,
    }
