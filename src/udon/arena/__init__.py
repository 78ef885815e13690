from .arena import ChunkArena, ChunkSlice

__all__ = [
    "ChunkArena",
    "ChunkSlice",
]
