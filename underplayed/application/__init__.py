"""Application layer - services and use cases for playlist jobs."""
