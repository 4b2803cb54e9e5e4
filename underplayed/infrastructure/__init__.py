"""Infrastructure layer - external services, storage, HTTP and CLI surfaces."""
