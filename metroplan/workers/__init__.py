"""
Worker package for asynchronous operations.

Engine requests run in background threads so a slow or unreachable engine
never freezes the editor.
"""

from .engine_worker import EngineWorker

__all__ = [
    'EngineWorker',
]
