"""
Document number generator
Hands out human-readable codes like "INW-26-0007" from a counter table.
"""

import threading
from datetime import datetime
from typing import Optional
from custody import db


class DocumentSequence(db.Model):
    """One counter row per (prefix, location, year) key."""
    __tablename__ = '_sequence_document_codes'

    id = db.Column(db.Integer, primary_key=True)
    sequence_key = db.Column(db.String(80), unique=True, nullable=False)
    current_value = db.Column(db.Integer, nullable=False, default=0)


class DocumentNumberGenerator:
    """
    Counter-table code generator.

    The counter is incremented inside the caller's transaction, so a rolled
    back document does not burn a number.
    """

    _lock = threading.Lock()

    PREFIXES = {
        'indent': 'PI',
        'order': 'PO',
        'inward': 'INW',
        'qc': 'QC',
        'job_work': 'JW',
        'outward': 'OUT',
        'movement': 'MOV',
    }

    @classmethod
    def sequence_key(cls, prefix: str, location_id: Optional[int], year: str) -> str:
        if location_id is None:
            return f"{prefix}:{year}"
        return f"{prefix}:{location_id}:{year}"

    @classmethod
    def get_next_value(cls, key: str) -> int:
        with cls._lock:
            row = (DocumentSequence.query
                   .filter_by(sequence_key=key)
                   .with_for_update()
                   .first())
            if row is None:
                row = DocumentSequence(sequence_key=key, current_value=0)
                db.session.add(row)
            row.current_value = (row.current_value or 0) + 1
            db.session.flush()
            return row.current_value

    @classmethod
    def generate_code(cls, prefix: str, location_id: Optional[int] = None, now: Optional[datetime] = None) -> str:
        """
        Build the next code for a prefix.

        Args:
            prefix: Document prefix, e.g. "INW"
            location_id: When given, numbering runs per location and the id
                is embedded in the code ("OUT-3-26-0001")
            now: Clock override for the two-digit year

        Returns:
            str: The generated code
        """
        year = (now or datetime.utcnow()).strftime('%y')
        value = cls.get_next_value(cls.sequence_key(prefix, location_id, year))
        if location_id is None:
            return f"{prefix}-{year}-{value:04d}"
        return f"{prefix}-{location_id}-{year}-{value:04d}"

    @classmethod
    def get_current_value(cls, prefix: str, location_id: Optional[int] = None, now: Optional[datetime] = None) -> int:
        year = (now or datetime.utcnow()).strftime('%y')
        row = DocumentSequence.query.filter_by(sequence_key=cls.sequence_key(prefix, location_id, year)).first()
        return row.current_value if row else 0
