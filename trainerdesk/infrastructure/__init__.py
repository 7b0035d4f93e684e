"""
Infrastructure layer - external service integrations.

- snowflake: Database persistence (real connections and an in-memory mock)

These wrappers translate between database rows and our domain models.
"""
