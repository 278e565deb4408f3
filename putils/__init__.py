"""
Utilities shared by the deployment code.
"""
from .aws import NoRegionError, get_region, opts
from .paio import background, run_sync

__all__ = (
    'NoRegionError', 'get_region', 'opts',
    'background', 'run_sync',
)
