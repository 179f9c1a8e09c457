"""Field and relation spec parsing.

Quick usage::

    from crudgen.parser import parse_fields, parse_relations

    fields = parse_fields("name:string, status:enum(open,closed)")
    relations = parse_relations("tasks:hasMany,owner:belongsTo")
"""

from crudgen.parser.models import FieldSpec, FieldType, RelationKind, RelationSpec
from crudgen.parser.spec_parser import parse_fields, parse_relations

__all__ = [
    "FieldSpec",
    "FieldType",
    "RelationKind",
    "RelationSpec",
    "parse_fields",
    "parse_relations",
]
