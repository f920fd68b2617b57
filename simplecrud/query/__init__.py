"""Query builders: one class per statement kind."""

from .base import Query
from .select import RELATION_KEY, Select
from .insert import Insert
from .update import Update
from .delete import Delete
from .aggregate import Aggregate, Count, Sum

__all__ = ["Query", "Select", "Insert", "Update", "Delete", "Aggregate", "Count", "Sum", "RELATION_KEY"]
