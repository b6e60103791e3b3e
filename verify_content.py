import sys
import logging
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from idlegame.content.cli import validate_packs
from idlegame.content.loader import load_equipment_definitions

def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("ContentVerification")

    root = Path(__file__).parent

    # Verify packs
    logger.info("Validating content packs...")
    if validate_packs(root / "content" / "packs") != 0:
        logger.error("VERIFICATION FAILED: content packs are invalid.")
        sys.exit(1)

    # Verify standalone equipment file
    equipment = load_equipment_definitions(root / "data" / "equipment.json")
    if equipment.used_fallback:
        logger.error("VERIFICATION FAILED: %s", equipment.error)
        sys.exit(1)

    logger.info("VERIFICATION SUCCESSFUL: %d equipment definitions loaded.", len(equipment.value))

if __name__ == "__main__":
    main()
