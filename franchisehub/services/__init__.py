"""Business services: cross-entity workflows on top of the repositories."""
