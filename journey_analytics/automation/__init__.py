from .retry import retry
from .run_metadata import create_run_metadata

__all__ = ["retry", "create_run_metadata"]
