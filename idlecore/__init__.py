"""
Idle runtime core.

Domain-agnostic building blocks the game layer is assembled from:
- Typed event bus
- Real-time tick loop
- Key-value storage backends
"""
