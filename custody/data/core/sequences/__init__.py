"""
Sequence managers
Counter tables for generated document numbers
"""

from custody.data.core.sequences.document_sequence import DocumentSequence, DocumentNumberGenerator

__all__ = [
    'DocumentSequence',
    'DocumentNumberGenerator',
]
