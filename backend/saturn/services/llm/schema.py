"""
Pydantic models for structured extraction.

An ExtractionSchema declares the fields a structured generation call must
return, rendered as a JSON-schema "object" for function calling:

{
  "name": "check_internet_access",
  "description": "...",
  "properties": {"needs_internet": {"type": "boolean", "description": "..."}},
  "required": ["needs_internet"]
}
"""
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator

# JSON-schema type name -> accepted Python types. bool is excluded from the
# numeric types explicitly in value_matches_type.
JSON_TYPES: Dict[str, tuple] = {
    "boolean": (bool,),
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "array": (list,),
    "object": (dict,),
}


class PropertySpec(BaseModel):
    """A single declared property: JSON type plus a description for the model."""

    type: str = Field(..., description="boolean | string | integer | number | array | object")
    description: str = ""

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        v = value.lower().strip()
        if v not in JSON_TYPES:
            raise ValueError(f"type must be one of {sorted(JSON_TYPES)}")
        return v


class ExtractionSchema(BaseModel):
    """Contract a structured extraction result must satisfy."""

    name: str = Field(..., min_length=1, description="Function name sent to the backend")
    description: str = ""
    properties: Dict[str, PropertySpec]
    required: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def required_subset_of_properties(self) -> "ExtractionSchema":
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(f"required names not declared in properties: {unknown}")
        return self

    def properties_payload(self) -> Dict[str, Dict[str, str]]:
        """JSON-schema ``properties`` mapping."""
        return {
            name: {"type": spec.type, "description": spec.description}
            for name, spec in self.properties.items()
        }


def value_matches_type(value: Any, json_type: str) -> bool:
    if json_type in ("integer", "number") and isinstance(value, bool):
        return False
    return isinstance(value, JSON_TYPES[json_type])


def missing_required_fields(result: Any, schema: ExtractionSchema) -> List[str]:
    """
    Names of required fields that are absent, null or of the wrong type.

    A non-mapping result fails every required field. An empty list means the
    result conforms to the schema.
    """
    if not isinstance(result, dict):
        return list(schema.required)

    missing = []
    for name in schema.required:
        value = result.get(name)
        if value is None or not value_matches_type(value, schema.properties[name].type):
            missing.append(name)
    return missing


def boolean_schema(
    name: str,
    description: str,
    field: str,
    field_description: str,
) -> ExtractionSchema:
    """Schema with exactly one required boolean field, as used by classifiers."""
    return ExtractionSchema(
        name=name,
        description=description,
        properties={field: PropertySpec(type="boolean", description=field_description)},
        required=[field],
    )
