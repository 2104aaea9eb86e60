"""
Grid Explorer module.

Provides Pokemon-style exploration built on top of the engine:
- World (tile catalog, grid, levels, the explorer orchestrator)
- Systems (movement, encounters, interaction)
- Save (persistence)
"""
