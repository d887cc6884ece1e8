"""ormhub FastAPI integration."""
