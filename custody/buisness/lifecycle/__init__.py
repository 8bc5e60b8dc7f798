"""
Item lifecycle business layer.

- ItemStateEngine: derives an item's process state from the documents
- CustodyResolver: applies holder changes
- Policies: per-document validation rules
- Managers: one orchestrator per document type (see managers/)
"""
