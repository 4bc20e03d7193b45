"""Validation schema compilation (Zod DTOs).

Each DTO field is lowered to a :class:`DTOFieldIR` holding the finished
expression; ``dto.ts.j2`` lays out the file.  Modifier order is fixed:
length bounds, then ``.nullable()``, then ``.optional()``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping

from ..naming import to_pascal_case
from .descriptors import DTOField
from .model_compiler import property_key
from .results import CompileResult, guarded
from .templates import TemplateRenderer

ZOD_FALLBACK = "z.any()"
DEFAULT_EMAIL_MESSAGE = "Please provide a valid email"


@dataclass(frozen=True)
class DTOFieldIR:
    name: str
    expression: str
    optional: bool

    @property
    def key(self) -> str:
        return property_key(self.name)


@dataclass(frozen=True)
class DTOSchemaIR:
    name: str
    fields: tuple[DTOFieldIR, ...]


def _quote(message: str) -> str:
    return json.dumps(message, ensure_ascii=False)


def base_expression(name: str, field: DTOField) -> str:
    """The type expression plus any length constraints."""
    if field.type == "string":
        expression = "z.string()"
        if field.min is not None:
            message = field.message or f"{name} minimum length is {field.min}"
            expression += f".min({field.min}, {_quote(message)})"
        if field.max is not None:
            message = field.message or f"{name} maximum length is {field.max}"
            expression += f".max({field.max}, {_quote(message)})"
        return expression
    if field.type == "number":
        return "z.number()"
    if field.type == "boolean":
        return "z.boolean()"
    if field.type == "email":
        return f"z.string().email({_quote(field.message or DEFAULT_EMAIL_MESSAGE)})"
    if field.type == "date":
        return "z.date()"
    if field.type == "array":
        return "z.array(z.any())"
    if field.type == "object":
        return "z.object({})"
    return ZOD_FALLBACK


def lower_dto_field(name: str, field: DTOField, partial: bool = False) -> DTOFieldIR:
    """Lower one field; *partial* forces ``.optional()`` regardless of the descriptor."""
    if not name:
        raise ValueError("field names must not be empty")
    expression = base_expression(name, field)
    if field.nullable:
        expression += ".nullable()"
    optional = field.optional or partial
    if optional:
        expression += ".optional()"
    return DTOFieldIR(name=name, expression=expression, optional=optional)


def build_schema_ir(
    schema_name: str, fields: Mapping[str, DTOField], partial: bool = False
) -> DTOSchemaIR:
    return DTOSchemaIR(
        name=schema_name,
        fields=tuple(lower_dto_field(name, field, partial) for name, field in fields.items()),
    )


def build_dto_irs(
    module_name: str,
    get_fields: Mapping[str, DTOField],
    create_fields: Mapping[str, DTOField],
    update_fields: Mapping[str, DTOField],
) -> tuple[DTOSchemaIR, DTOSchemaIR, DTOSchemaIR]:
    """The get, create and (partial) update schemas, in file order."""
    type_name = to_pascal_case(module_name)
    return (
        build_schema_ir(f"{type_name}GetDTO", get_fields),
        build_schema_ir(f"{type_name}CreateDTO", create_fields),
        build_schema_ir(f"{type_name}UpdateDTO", update_fields, partial=True),
    )


def compile_dto(
    module_name: str,
    get_fields: Mapping[str, DTOField],
    create_fields: Mapping[str, DTOField],
    update_fields: Mapping[str, DTOField],
    renderer: TemplateRenderer | None = None,
) -> CompileResult:
    """Compile the three DTO field sets into the DTO file text.

    Never raises; failures are logged and returned as :class:`CompileFailure`.
    """
    active = renderer or TemplateRenderer()

    def _render() -> str:
        schemas = build_dto_irs(module_name, get_fields, create_fields, update_fields)
        return active.render("dto.ts.j2", {"schemas": schemas})

    return guarded("dto", module_name, _render)
