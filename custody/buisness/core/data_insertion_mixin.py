"""
Generic data insertion mixin for SQLAlchemy models
Provides from_dict and to_dict methods for automatic data insertion

Lives in the business layer because it owns the audit fields (created_by_id,
updated_by_id) and the serialization rules shared by the API and the managers.
"""

from custody import db
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import inspect
from custody.utils.logger import get_logger

logger = get_logger("custody.core.data_insertion")

AUDIT_FIELDS = ['created_at', 'updated_at', 'created_by_id', 'updated_by_id']


class DataInsertionMixin:
    """
    Mixin that provides generic data insertion capabilities for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create model instance from dictionary
    - to_dict(): Convert model instance to dictionary
    - create_from_dict(): Create and stage (optionally commit) an instance
    - find_or_create_from_dict(): Lookup by unique or given fields, else create
    """

    # Columns never serialized by to_dict (secrets, internal version counters)
    _hidden_columns = ()

    @classmethod
    def from_dict(cls, data_dict, user_id=None, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            user_id (int, optional): User ID for audit fields
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not saved to database)
        """
        if skip_fields is None:
            skip_fields = []

        mapper = inspect(cls)
        columns = {c.key: c for c in mapper.columns}

        filtered_data = {}
        for key, value in data_dict.items():
            if key not in columns or key in skip_fields:
                continue
            if key in ['created_at', 'updated_at'] and value is None:
                continue
            filtered_data[key] = value

        instance = cls(**filtered_data)

        if user_id is not None:
            if hasattr(instance, 'created_by_id') and not instance.created_by_id:
                instance.created_by_id = user_id
            if hasattr(instance, 'updated_by_id'):
                instance.updated_by_id = user_id

        return instance

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        """
        Convert model instance to dictionary

        Args:
            include_relationships (bool): Whether to include many-to-one relationship data
            include_audit_fields (bool): Whether to include audit fields

        Returns:
            dict: Dictionary representation of the model
        """
        result = {}

        mapper = inspect(self.__class__)

        for column in mapper.columns:
            if column.key in self._hidden_columns:
                continue
            if not include_audit_fields and column.key in AUDIT_FIELDS:
                continue

            value = getattr(self, column.key)
            if isinstance(value, (datetime, date)):
                result[column.key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[column.key] = float(value)
            else:
                result[column.key] = value

        if include_relationships:
            for relationship in mapper.relationships:
                if relationship.uselist or relationship.key in result:
                    continue
                related_obj = getattr(self, relationship.key)
                if related_obj is None:
                    result[relationship.key] = None
                elif hasattr(related_obj, 'to_dict'):
                    result[relationship.key] = related_obj.to_dict()
                else:
                    result[relationship.key] = str(related_obj)

        return result

    @classmethod
    def create_from_dict(cls, data_dict, user_id=None, skip_fields=None, commit=True):
        """
        Create and save a model instance from dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            user_id (int, optional): User ID for audit fields
            skip_fields (list, optional): Fields to skip during creation
            commit (bool): Whether to commit the transaction; otherwise the
                instance is flushed so its id is available to the caller

        Returns:
            Model instance
        """
        instance = cls.from_dict(data_dict, user_id, skip_fields)

        try:
            db.session.add(instance)
            if commit:
                db.session.commit()
                logger.info(f"Created {cls.__name__}: {instance}")
            else:
                db.session.flush()
            return instance
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating {cls.__name__}: {e}")
            raise

    @classmethod
    def find_or_create_from_dict(cls, data_dict, user_id=None, skip_fields=None,
                                 lookup_fields=None, commit=True):
        """
        Find existing instance or create new one from dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            user_id (int, optional): User ID for audit fields
            skip_fields (list, optional): Fields to skip during creation
            lookup_fields (list, optional): Fields to use for lookup (default: unique fields)
            commit (bool): Whether to commit the transaction

        Returns:
            tuple: (instance, created) where created is boolean
        """
        if lookup_fields is None:
            mapper = inspect(cls)
            lookup_fields = [c.key for c in mapper.columns if c.unique and c.key in data_dict]

        lookup_data = {field: data_dict[field] for field in (lookup_fields or []) if field in data_dict}
        if not lookup_data:
            return cls.create_from_dict(data_dict, user_id, skip_fields, commit), True

        existing = cls.query.filter_by(**lookup_data).first()
        if existing:
            logger.debug(f"Found existing {cls.__name__}: {existing}")
            return existing, False

        return cls.create_from_dict(data_dict, user_id, skip_fields, commit), True
