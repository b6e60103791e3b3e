"""
Equipment definitions - schema validation and owned/equipped lookup.

Equipment files are authored by hand, so validation reports every
problem it finds in one pass instead of stopping at the first. The
structural rules are a JSON Schema checked with ``jsonschema``; id
uniqueness spans the whole list and is checked alongside it.

A list that fails validation is rejected as a whole.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from jsonschema import Draft7Validator, ValidationError, validators

from idlegame.values import is_non_empty_string


class EquipmentSlot(Enum):
    """Equipment slot types."""
    HEAD = "head"
    CHEST = "chest"
    HANDS = "hands"
    LEGS = "legs"
    FEET = "feet"
    WEAPON = "weapon"
    OFFHAND = "offhand"
    ACCESSORY = "accessory"


EQUIPMENT_SLOTS: tuple[str, ...] = tuple(slot.value for slot in EquipmentSlot)

# Checked (and reported) in this order
EQUIPMENT_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "slot",
    "tier",
    "tags",
    "baseEffects",
    "flavorText",
    "loreRefs",
)

_NON_EMPTY_STRING = {"type": "string", "pattern": r"\S"}

EQUIPMENT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "id": _NON_EMPTY_STRING,
        "name": _NON_EMPTY_STRING,
        "slot": {"enum": list(EQUIPMENT_SLOTS)},
        "tier": {"type": "integer", "minimum": 1},
        "tags": {"type": "array", "items": _NON_EMPTY_STRING},
        "baseEffects": {
            "type": "object",
            "minProperties": 1,
            "propertyNames": _NON_EMPTY_STRING,
            "additionalProperties": {
                "type": "number",
                "exclusiveMinimum": 0,
                "finite": True,
            },
        },
        "flavorText": _NON_EMPTY_STRING,
        "loreRefs": {"type": "array", "items": _NON_EMPTY_STRING},
    },
}


def _finite(validator, finite, instance, schema):
    """``finite`` keyword: reject NaN and infinities."""
    if not finite or not validator.is_type(instance, "number") or isinstance(instance, int):
        return
    if not math.isfinite(instance):
        yield ValidationError(f"{instance!r} is not a finite number")


EquipmentValidator = validators.extend(Draft7Validator, {"finite": _finite})

_validator = EquipmentValidator(EQUIPMENT_SCHEMA)

_FIELD_MESSAGES = {
    "id": "must be a non-empty string.",
    "name": "must be a non-empty string.",
    "tier": "must be an integer >= 1.",
    "tags": "must be a list of non-empty strings.",
    "baseEffects": "must be a non-empty object.",
    "flavorText": "must be a non-empty string.",
    "loreRefs": "must be a list of non-empty strings.",
}


@dataclass
class ValidationResult:
    """Outcome of validating a list of definitions."""
    is_valid: bool
    errors: list[str] = field(default_factory=list)


class EquipmentValidationError(ValueError):
    """Raised when equipment definitions fail validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid equipment definitions:\n- " + "\n- ".join(self.errors))


def validate_equipment_definitions(definitions: Any) -> ValidationResult:
    """
    Validate equipment definitions, collecting every violation.

    Args:
        definitions: Parsed equipment file (expected: a list of objects)

    Returns:
        ValidationResult with messages like ``entry[3].slot: ...``
    """
    if not isinstance(definitions, list):
        return ValidationResult(False, ["Equipment definitions must be a list."])

    errors: list[str] = []
    seen_ids: set[str] = set()

    for index, definition in enumerate(definitions):
        errors.extend(_entry_errors(index, definition, seen_ids))

    return ValidationResult(not errors, errors)


def assert_valid_equipment_definitions(definitions: Any) -> list[dict[str, Any]]:
    """
    Return definitions unchanged if valid.

    Raises:
        EquipmentValidationError: Listing every collected problem
    """
    result = validate_equipment_definitions(definitions)
    if not result.is_valid:
        raise EquipmentValidationError(result.errors)
    return definitions


def _entry_errors(index: int, definition: Any, seen_ids: set[str]) -> list[str]:
    path = f"entry[{index}]"
    if not isinstance(definition, Mapping):
        return [f"{path}: must be an object."]

    # Absent fields are validated as None so every failure lands on a field path
    projected = {name: definition.get(name) for name in EQUIPMENT_FIELDS}

    failed_fields: set[str] = set()
    has_empty_effect_key = False
    bad_effects: set[str] = set()

    for error in _validator.iter_errors(projected):
        location = list(error.absolute_path)
        if not location:
            continue
        field_name = location[0]

        if field_name == "baseEffects":
            if "propertyNames" in error.absolute_schema_path:
                has_empty_effect_key = True
                continue
            if len(location) > 1:
                bad_effects.add(location[1])
                continue

        failed_fields.add(field_name)

    errors: list[str] = []
    for field_name in EQUIPMENT_FIELDS:
        if field_name == "id":
            errors.extend(_id_errors(path, projected["id"], "id" in failed_fields, seen_ids))
        elif field_name == "slot":
            if "slot" in failed_fields:
                errors.append(
                    f"{path}.slot: '{projected['slot']}' is invalid. "
                    f"Allowed slots: {', '.join(EQUIPMENT_SLOTS)}."
                )
        elif field_name == "baseEffects":
            errors.extend(
                _effect_errors(
                    path,
                    projected["baseEffects"],
                    "baseEffects" in failed_fields,
                    has_empty_effect_key,
                    bad_effects,
                )
            )
        elif field_name in failed_fields:
            errors.append(f"{path}.{field_name}: {_FIELD_MESSAGES[field_name]}")

    return errors


def _id_errors(path: str, equipment_id: Any, failed: bool, seen_ids: set[str]) -> list[str]:
    if failed:
        return [f"{path}.id: {_FIELD_MESSAGES['id']}"]
    if equipment_id in seen_ids:
        return [f"{path}.id: duplicate id '{equipment_id}'."]
    seen_ids.add(equipment_id)
    return []


def _effect_errors(
    path: str,
    effects: Any,
    failed_shape: bool,
    has_empty_key: bool,
    bad_effects: set[str],
) -> list[str]:
    if failed_shape:
        return [f"{path}.baseEffects: {_FIELD_MESSAGES['baseEffects']}"]

    errors: list[str] = []
    if has_empty_key:
        errors.append(f"{path}.baseEffects: contains an empty effect key.")
    for effect_name in effects:
        if effect_name in bad_effects:
            errors.append(
                f"{path}.baseEffects.{effect_name}: must be a finite number greater than 0."
            )
    return errors


# Owned / equipped lookup

@dataclass
class EquipmentView:
    """Definitions resolved for what the player owns and wears."""
    owned: list[dict[str, Any]] = field(default_factory=list)
    equipped: dict[str, dict[str, Any]] = field(default_factory=dict)

    def is_owned(self, equipment_id: str) -> bool:
        return any(item["id"] == equipment_id for item in self.owned)

    def is_equipped(self, equipment_id: str) -> bool:
        return any(item["id"] == equipment_id for item in self.equipped.values())


def index_equipment_definitions(definitions: Any) -> dict[str, dict[str, Any]]:
    """Validate, then map id -> definition."""
    valid = assert_valid_equipment_definitions(definitions)
    return {definition["id"]: definition for definition in valid}


def build_equipment_view(
    definitions: Any,
    owned_ids: Iterable[str] = (),
    equipped_by_slot: Mapping[str, str] | None = None,
) -> EquipmentView:
    """
    Resolve owned ids and equipped slots to definitions.

    Ids with no matching definition are left out.
    """
    by_id = index_equipment_definitions(definitions)

    owned = [by_id[item_id] for item_id in owned_ids if item_id in by_id]
    equipped = {
        slot: by_id[item_id]
        for slot, item_id in (equipped_by_slot or {}).items()
        if is_non_empty_string(item_id) and item_id in by_id
    }
    return EquipmentView(owned=owned, equipped=equipped)
