"""
Inventory module - equipment definitions.

Provides:
- Equipment schema validation (all problems collected in one pass)
- Owned/equipped resolution against validated definitions
"""

from idlegame.inventory.equipment import (
    EquipmentSlot,
    EQUIPMENT_SLOTS,
    EQUIPMENT_SCHEMA,
    ValidationResult,
    EquipmentValidationError,
    EquipmentView,
    validate_equipment_definitions,
    assert_valid_equipment_definitions,
    index_equipment_definitions,
    build_equipment_view,
)

__all__ = [
    "EquipmentSlot",
    "EQUIPMENT_SLOTS",
    "EQUIPMENT_SCHEMA",
    "ValidationResult",
    "EquipmentValidationError",
    "EquipmentView",
    "validate_equipment_definitions",
    "assert_valid_equipment_definitions",
    "index_equipment_definitions",
    "build_equipment_view",
]
