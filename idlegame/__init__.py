"""
Idle game layer.

Builds on idlecore to provide:
- Stats, jobs, tasks and the progression engine
- Equipment definitions and their validation
- Content packs merged in dependency order
- Versioned save/load of the runtime state
- A headless game that wires everything together
"""

from idlegame.game import GameConfig, IdleGame

__all__ = [
    "GameConfig",
    "IdleGame",
]
