"""RoutineSense: routine sync, streaks, insights and version history."""

__version__ = "1.0.0"
