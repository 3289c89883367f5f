"""Task Master backend: deadline and planner reminder service."""
