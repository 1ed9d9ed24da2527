"""Admin use cases for system administration operations."""

from .get_system_stats_use_case import GetSystemStatsUseCase, GetSystemStatsResponse

__all__ = [
    "GetSystemStatsUseCase",
    "GetSystemStatsResponse",
]
