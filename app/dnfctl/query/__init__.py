"""Package database query adapters.

This module exports the adapter interface and the DNF implementation.
"""

from dnfctl.query.base import LookupFailure, QueryAdapter, QueryError
from dnfctl.query.dnf import DnfQueryAdapter

__all__ = ["DnfQueryAdapter", "LookupFailure", "QueryAdapter", "QueryError"]
