"""
Reconciles KMS grants for a deployment's roles.

Declare which roles may use which keys, then apply() after deploying and
revoke() before tearing down. Both only act on what's missing or left over, so
they can be run any number of times.
"""
from .declarations import (
    DeploymentContext, GrantDeclaration, GrantMatch, parse_declarations,
)
from .errors import (
    ConfigurationError, KmsGrantsError, NotFoundError, ReconciliationError,
    SERVICE_ERRORS,
)
from .reconciler import GRANT_OPERATIONS, GrantReconciler
from .resolver import IdentityResolver, default_role_name

__all__ = (
    'DeploymentContext', 'GrantDeclaration', 'GrantMatch', 'parse_declarations',
    'ConfigurationError', 'KmsGrantsError', 'NotFoundError',
    'ReconciliationError', 'SERVICE_ERRORS',
    'GRANT_OPERATIONS', 'GrantReconciler',
    'IdentityResolver', 'default_role_name',
)
