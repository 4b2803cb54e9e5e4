"""Background job execution."""

from .runner import JobRunner, UseCaseFactory

__all__ = ["JobRunner", "UseCaseFactory"]
