"""Table model: field descriptors, field actions, header/row/table."""

from orgdir.model.actions import FieldAction
from orgdir.model.fields import Field, parse_field
from orgdir.model.table import Header, Row, Table

__all__ = ["Field", "FieldAction", "Header", "Row", "Table", "parse_field"]
