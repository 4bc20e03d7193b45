"""Storage schema compilation (Mongoose models).

Field descriptors are first lowered to a small IR (:class:`SchemaField`,
:class:`SchemaArray`, :class:`SchemaObject`) and then printed.  The printer in
this module owns the indentation of the schema body; ``model.ts.j2`` owns the
rest of the file.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping, Union

from ..naming import to_pascal_case
from .descriptors import ModelField
from .results import CompileResult, guarded
from .templates import TemplateRenderer

MONGOOSE_TYPES: dict[str, str] = {
    "String": "String",
    "Number": "Number",
    "Boolean": "Boolean",
    "Date": "Date",
    "Buffer": "Buffer",
    "ObjectId": "Schema.Types.ObjectId",
    "Array": "Array",
    "Decimal128": "Schema.Types.Decimal128",
    "Map": "Map",
    "Mixed": "Schema.Types.Mixed",
}
MONGOOSE_FALLBACK = "Schema.Types.Mixed"

TS_TYPES: dict[str, str] = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Date": "string",
    "Buffer": "Buffer",
    "ObjectId": "Types.ObjectId",
    "Array": "any[]",
    "Decimal128": "any",
    "Map": "Map<string, any>",
    "Mixed": "any",
}
TS_FALLBACK = "any"

# Attribute order after ``type``; changing it changes every generated model.
ATTRIBUTE_ORDER: tuple[str, ...] = (
    "ref",
    "required",
    "unique",
    "default",
    "enum",
    "lowercase",
    "uppercase",
    "trim",
    "minlength",
    "maxlength",
    "sparse",
    "index",
)

_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_INDENT = "  "


# ---------------------------------------------------------------------------
# IR
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaObject:
    fields: tuple["SchemaField", ...]


@dataclass(frozen=True)
class SchemaArray:
    element: "SchemaType"


SchemaType = Union[str, SchemaArray, SchemaObject]


@dataclass(frozen=True)
class SchemaField:
    """One schema entry: its storage type, ordered attributes and TS type."""

    name: str
    type: SchemaType
    attributes: tuple[tuple[str, str], ...]
    ts_type: str


@dataclass(frozen=True)
class ModelIR:
    module_name: str
    type_name: str
    schema_name: str
    model_name: str
    fields: tuple[SchemaField, ...]

    @property
    def uses_types_namespace(self) -> bool:
        """Whether the interface references ``Types.*`` (needs the import)."""
        return any("Types." in field.ts_type for field in self.fields)


# ---------------------------------------------------------------------------
# Lowering
# ---------------------------------------------------------------------------


def js_literal(value: Any) -> str:
    """Serialize *value* the way ``JSON.stringify`` would.

    Raises:
        TypeError: If the value is not JSON-serializable.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def lower_type(field_type: Any) -> SchemaType:
    """Translate a descriptor ``type`` into its storage-engine representation."""
    if isinstance(field_type, list):
        return SchemaArray(lower_type(field_type[0]))
    if isinstance(field_type, dict):
        return SchemaObject(tuple(lower_field(name, sub) for name, sub in field_type.items()))
    return MONGOOSE_TYPES.get(field_type, MONGOOSE_FALLBACK)


def ts_type_for(field_type: Any) -> str:
    """Translate a descriptor ``type`` into a TypeScript type annotation."""
    if isinstance(field_type, list):
        return f"{ts_type_for(field_type[0])}[]"
    if isinstance(field_type, dict):
        members = " ".join(
            f"{property_key(name)}: {ts_type_for(sub.type)};" for name, sub in field_type.items()
        )
        return f"{{ {members} }}"
    return TS_TYPES.get(field_type, TS_FALLBACK)


def lower_attributes(field: ModelField) -> tuple[tuple[str, str], ...]:
    """Collect the set modifiers in :data:`ATTRIBUTE_ORDER`."""
    rendered: dict[str, str] = {}
    if field.ref is not None:
        rendered["ref"] = js_literal(field.ref)
    for flag in ("required", "unique"):
        if getattr(field, flag):
            rendered[flag] = "true"
    if field.has_default:
        rendered["default"] = js_literal(field.default)
    if field.enum is not None:
        rendered["enum"] = js_literal(field.enum)
    for flag in ("lowercase", "uppercase", "trim"):
        if getattr(field, flag):
            rendered[flag] = "true"
    for bound in ("minlength", "maxlength"):
        value = getattr(field, bound)
        if value is not None:
            rendered[bound] = str(value)
    for flag in ("sparse", "index"):
        if getattr(field, flag):
            rendered[flag] = "true"
    return tuple((key, rendered[key]) for key in ATTRIBUTE_ORDER if key in rendered)


def lower_field(name: str, field: ModelField) -> SchemaField:
    if not name:
        raise ValueError("field names must not be empty")
    return SchemaField(
        name=name,
        type=lower_type(field.type),
        attributes=lower_attributes(field),
        ts_type=ts_type_for(field.type),
    )


def build_model_ir(module_name: str, fields: Mapping[str, ModelField]) -> ModelIR:
    type_name = to_pascal_case(module_name)
    return ModelIR(
        module_name=module_name,
        type_name=f"{type_name}Type",
        schema_name=f"{type_name}Schema",
        model_name=f"{type_name}Model",
        fields=tuple(lower_field(name, field) for name, field in fields.items()),
    )


# ---------------------------------------------------------------------------
# Printer
# ---------------------------------------------------------------------------


def property_key(name: str) -> str:
    """Emit *name* bare when it is a JS identifier, quoted otherwise."""
    if _IDENTIFIER.fullmatch(name):
        return name
    return json.dumps(name, ensure_ascii=False)


def print_type(schema_type: SchemaType, depth: int) -> list[str]:
    """Lines for a type value whose first line follows ``type: `` at *depth*."""
    if isinstance(schema_type, SchemaArray):
        lines = print_type(schema_type.element, depth)
        lines[0] = "[" + lines[0]
        lines[-1] = lines[-1] + "]"
        return lines
    if isinstance(schema_type, SchemaObject):
        body = [line for field in schema_type.fields for line in print_field(field, depth + 1)]
        return ["{", *body, _INDENT * depth + "}"]
    return [schema_type]


def print_field(field: SchemaField, depth: int) -> list[str]:
    """Lines for ``name: { type: ..., attr: value, },`` at *depth*."""
    pad = _INDENT * depth
    inner = _INDENT * (depth + 1)
    type_lines = print_type(field.type, depth + 1)
    lines = [f"{pad}{property_key(field.name)}: {{", f"{inner}type: {type_lines[0]}"]
    lines.extend(type_lines[1:])
    lines[-1] += ","
    lines.extend(f"{inner}{key}: {value}," for key, value in field.attributes)
    lines.append(f"{pad}}},")
    return lines


def print_schema_body(ir: ModelIR, depth: int = 2) -> str:
    return "\n".join(line for field in ir.fields for line in print_field(field, depth))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def render_model(ir: ModelIR, renderer: TemplateRenderer) -> str:
    return renderer.render(
        "model.ts.j2",
        {
            "model": ir,
            "interface_fields": [(property_key(f.name), f.ts_type) for f in ir.fields],
            "schema_body": print_schema_body(ir),
        },
    )


def compile_model(
    module_name: str,
    fields: Mapping[str, ModelField],
    renderer: TemplateRenderer | None = None,
) -> CompileResult:
    """Compile storage field descriptors into the model file text.

    Never raises: any error (for example a non-serializable ``default``) is
    logged and returned as a :class:`CompileFailure`.
    """
    active = renderer or TemplateRenderer()
    return guarded(
        "model",
        module_name,
        lambda: render_model(build_model_ir(module_name, fields), active),
    )
