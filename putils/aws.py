import os

import pulumi

from . import localstack

__all__ = 'NoRegionError', 'get_region', 'opts'


class NoRegionError(Exception):
    """
    Raised if we aren't able to detect the current region
    """


def get_region():
    """
    Gets the AWS region the stack deploys to.
    """
    config = pulumi.Config("aws").get('region')
    # These are stolen out of pulumi-aws
    if config:
        return config
    elif 'AWS_REGION' in os.environ:
        return os.environ['AWS_REGION']
    elif 'AWS_DEFAULT_REGION' in os.environ:
        return os.environ['AWS_DEFAULT_REGION']
    else:
        raise NoRegionError("Unable to determine AWS Region")


def opts(**kwargs):
    """
    Defines the opts for AWS resources, including any localstack config.

    localstack config is only applied if this is a top-level resource (does not
    have a parent).

    Usage:
    >>> Resource(..., **opts(...))
    """
    local = localstack.get_provider()
    if local is not None and 'parent' not in kwargs:
        # Unless a parent is set, in which case lets use inheritance
        kwargs.setdefault('provider', local)
    return {
        'opts': pulumi.ResourceOptions(**kwargs)
    }
