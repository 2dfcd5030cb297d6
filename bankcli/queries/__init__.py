"""Query execution package."""

from bankcli.queries.executor import QueryExecutor

__all__ = ["QueryExecutor"]
