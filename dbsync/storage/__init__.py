"""Database access: data source resolution, reflection and reads."""

from dbsync.storage.data_sources import DataSourceRegistry
from dbsync.storage.schema_introspector import SchemaIntrospector
from dbsync.storage.table_reader import TableReader

__all__ = ["DataSourceRegistry", "SchemaIntrospector", "TableReader"]
