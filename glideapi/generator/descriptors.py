"""Field and module descriptors: the input of every generator.

Two descriptor families exist because the two compilers target different
libraries in the generated project:

* :class:`ModelField` describes a storage (Mongoose) schema field.
* :class:`DTOField` describes a validation (Zod) rule.

Invalid type/modifier combinations are rejected when a descriptor is built.
Values that only fail at render time (a ``default`` that cannot be serialized
to JSON, for example) are left to the compilers, which report them as a
:class:`~glideapi.generator.results.CompileFailure`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import FieldDescriptorError

# ---------------------------------------------------------------------------
# Type enumerations
# ---------------------------------------------------------------------------

MODEL_TYPES: tuple[str, ...] = (
    "String",
    "Number",
    "Boolean",
    "Date",
    "Buffer",
    "ObjectId",
    "Array",
    "Decimal128",
    "Map",
    "Mixed",
)

DTO_TYPES: tuple[str, ...] = (
    "string",
    "number",
    "boolean",
    "email",
    "date",
    "array",
    "object",
)

_STRING_ONLY_MODIFIERS = ("enum", "lowercase", "uppercase", "trim", "minlength", "maxlength")


# ---------------------------------------------------------------------------
# Storage descriptors
# ---------------------------------------------------------------------------


class ModelField(BaseModel):
    """One storage schema field.

    ``type`` is a type tag from :data:`MODEL_TYPES`, a one-element list for
    arrays (``["String"]`` or ``[{"street": {...}}]``), or a mapping of
    sub-field name to :class:`ModelField` for nested objects.  Unknown tags
    are accepted and compile to ``Schema.Types.Mixed``.
    """

    model_config = ConfigDict(extra="forbid")

    type: Union[str, list[Union[str, dict[str, "ModelField"]]], dict[str, "ModelField"]]
    required: bool = False
    unique: bool = False
    default: Any = None
    enum: list[str] | None = None
    ref: str | None = None
    lowercase: bool = False
    uppercase: bool = False
    trim: bool = False
    minlength: int | None = Field(default=None, ge=0)
    maxlength: int | None = Field(default=None, ge=0)
    sparse: bool = False
    index: bool = False

    @property
    def has_default(self) -> bool:
        """True when ``default`` was supplied, including an explicit ``None``."""
        return "default" in self.model_fields_set

    @property
    def scalar_tag(self) -> str | None:
        """The type tag of a scalar field or of an array of scalars."""
        if isinstance(self.type, str):
            return self.type
        if isinstance(self.type, list) and self.type and isinstance(self.type[0], str):
            return self.type[0]
        return None

    @model_validator(mode="after")
    def _check_modifiers(self) -> "ModelField":
        if isinstance(self.type, list) and len(self.type) != 1:
            raise ValueError(
                f"array type must hold exactly one element type, got {len(self.type)}"
            )
        if isinstance(self.type, dict) and not self.type:
            raise ValueError("nested object type must declare at least one field")

        tag = self.scalar_tag
        for modifier in _STRING_ONLY_MODIFIERS:
            value = getattr(self, modifier)
            if value is not None and value is not False and tag != "String":
                raise ValueError(f"'{modifier}' is only valid on String fields, not {self._describe()}")
        if self.ref is not None and tag != "ObjectId":
            raise ValueError(f"'ref' is only valid on ObjectId fields, not {self._describe()}")
        if self.lowercase and self.uppercase:
            raise ValueError("'lowercase' and 'uppercase' are mutually exclusive")
        if (
            self.minlength is not None
            and self.maxlength is not None
            and self.minlength > self.maxlength
        ):
            raise ValueError(f"minlength ({self.minlength}) exceeds maxlength ({self.maxlength})")
        if self.enum is not None:
            if not self.enum:
                raise ValueError("'enum' must list at least one value")
            if self.has_default and self.default is not None and self.default not in self.enum:
                raise ValueError(f"default {self.default!r} is not one of enum {self.enum}")
        return self

    def _describe(self) -> str:
        if isinstance(self.type, dict):
            return "a nested object"
        if isinstance(self.type, list):
            inner = self.type[0]
            return f"an array of {inner if isinstance(inner, str) else 'objects'}"
        return self.type


ModelField.model_rebuild()


# ---------------------------------------------------------------------------
# Validation descriptors
# ---------------------------------------------------------------------------


class DTOField(BaseModel):
    """One validation rule.  Unknown type tags compile to ``z.any()``."""

    model_config = ConfigDict(extra="forbid")

    type: str
    min: int | None = Field(default=None, ge=0)
    max: int | None = Field(default=None, ge=0)
    message: str | None = None
    optional: bool = False
    nullable: bool = False

    @model_validator(mode="after")
    def _check_bounds(self) -> "DTOField":
        if (self.min is not None or self.max is not None) and self.type != "string":
            raise ValueError(f"'min'/'max' are only valid on string fields, not {self.type}")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) exceeds max ({self.max})")
        return self


# ---------------------------------------------------------------------------
# Module descriptor
# ---------------------------------------------------------------------------


class ModuleDescriptor(BaseModel):
    """Everything the module generator needs to emit one CRUD module."""

    model_config = ConfigDict(extra="forbid")

    name: str
    storage_fields: dict[str, ModelField]
    get_fields: dict[str, DTOField] = Field(default_factory=dict)
    create_fields: dict[str, DTOField] = Field(default_factory=dict)
    update_fields: dict[str, DTOField] = Field(default_factory=dict)
    authenticated: bool = False

    @classmethod
    def from_manifest(cls, data: dict[str, Any], name: str | None = None) -> "ModuleDescriptor":
        """Build a descriptor from a module manifest dict.

        Expected shape::

            {
              "name": "blogs",
              "model": {"title": {"type": "String", "required": true}},
              "dto": {"get": {...}, "create": {...}, "update": {...}},
              "authenticated": false
            }

        ``name`` overrides the manifest's own name.  When ``dto.update`` is
        omitted the create rules are reused (they are forced optional anyway).

        Raises:
            FieldDescriptorError: If any descriptor is invalid.
        """
        dto = data.get("dto") or {}
        create = dto.get("create", {})
        payload = {
            "name": name or data.get("name", ""),
            "storage_fields": data.get("model", {}),
            "get_fields": dto.get("get", {}),
            "create_fields": create,
            "update_fields": dto.get("update", create),
            "authenticated": data.get("authenticated", False),
        }
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise FieldDescriptorError(_format_validation_error(exc)) from exc

    @classmethod
    def from_file(cls, path: Path, name: str | None = None) -> "ModuleDescriptor":
        """Load a module manifest JSON file (see :meth:`from_manifest`)."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FieldDescriptorError(f"Cannot read module descriptor {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise FieldDescriptorError(f"Module descriptor {path} must contain a JSON object")
        return cls.from_manifest(data, name=name)


def default_descriptor(name: str, authenticated: bool = False) -> ModuleDescriptor:
    """The descriptor used when ``generate-module`` gets no field file.

    A single required, trimmed ``name`` string, readable with its ``_id``.
    """
    return ModuleDescriptor(
        name=name,
        storage_fields={"name": ModelField(type="String", required=True, trim=True)},
        get_fields={
            "_id": DTOField(type="any"),
            "name": DTOField(type="string"),
        },
        create_fields={"name": DTOField(type="string", min=1, message="Name is required")},
        update_fields={"name": DTOField(type="string", min=1, message="Name is required")},
        authenticated=authenticated,
    )


def _format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into ``location: message`` lines."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        lines.append(f"{location}: {error['msg']}")
    return "Invalid module descriptor:\n  " + "\n  ".join(lines)
