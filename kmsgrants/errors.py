"""
Errors raised while reconciling grants.

Anything else the AWS services report (throttling, permissions, transport) is a
botocore error and propagates as-is; SERVICE_ERRORS names them for callers that
want to catch them.
"""
from botocore.exceptions import BotoCoreError, ClientError

__all__ = (
    'KmsGrantsError', 'ConfigurationError', 'NotFoundError',
    'ReconciliationError', 'SERVICE_ERRORS',
)

SERVICE_ERRORS = (ClientError, BotoCoreError)


class KmsGrantsError(Exception):
    """
    Base for our own errors
    """


class ConfigurationError(KmsGrantsError, ValueError):
    """
    A declaration or the deployment context is missing something required
    """


class NotFoundError(KmsGrantsError, LookupError):
    """
    KMS or IAM says the referenced key or role does not exist
    """


class ReconciliationError(KmsGrantsError):
    """
    One or more declarations in a batch failed.

    failures is a list of (declaration, exception) pairs, in declaration order.
    """
    def __init__(self, operation, failures):
        self.operation = operation
        self.failures = list(failures)
        super().__init__(
            f"{operation} failed for {len(self.failures)} declaration(s): " +
            "; ".join(f"{decl}: {err}" for decl, err in self.failures)
        )
