import sys
import json
import logging
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from explorer.config import ExplorerConfig
from explorer.world.level import LevelLoader
from explorer.world.tiles import TileCatalog


def verify_level(path, loader, catalog, known_levels):
    """Assert a level file is loadable and consistent with the catalog."""
    with open(path, 'r', encoding='utf-8') as f:
        document = json.load(f)

    level = loader.from_document(document)
    assert not level.is_fallback, f"{path.name} fell back to the generated level"

    unknown = {tag for _, tag in level.grid if tag and tag not in catalog}
    assert not unknown, f"{path.name} uses unknown tiles: {sorted(unknown)}"

    start_tag = level.grid.get_tile(level.player_start)
    assert catalog.is_walkable(start_tag), f"{path.name} starts the player on '{start_tag}'"

    for tag in {tag for _, tag in level.grid if tag}:
        transition = catalog.lookup(tag).transition
        if transition and transition.target_level:
            assert transition.target_level in known_levels, (
                f"'{tag}' in {path.name} leads to missing level '{transition.target_level}'"
            )

    return level


def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("DataVerification")

    try:
        config = ExplorerConfig(data_path=Path("data"))

        logger.info("Loading tile catalog...")
        catalog = TileCatalog.load(config.catalog_path)
        assert not catalog.is_fallback, f"Could not load {config.catalog_path}"
        assert "grass" in catalog, "Missing grass tile"
        assert catalog.lookup("grass").has_encounters, "Grass has no encounters"
        assert not catalog.is_walkable("tree"), "Trees must block movement"

        level_files = sorted(config.data_path.glob("worlds/*/levels/*.json"))
        assert level_files, "No level files found"
        known_levels = {path.stem for path in level_files}

        loader = LevelLoader(config)
        for path in level_files:
            level = verify_level(path, loader, catalog, known_levels)
            logger.info(f"Verified {path.parent.parent.name}/{path.stem}: {level.name}")

        default_path = config.level_path(config.default_world, config.default_level)
        assert default_path.exists(), f"Missing default level {default_path}"

        logger.info("VERIFICATION SUCCESSFUL: All data loaded and validated.")

    except Exception as e:
        logger.error(f"VERIFICATION FAILED: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
