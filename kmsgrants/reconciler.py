"""
Makes the grants in KMS match the declarations.

Everything here is find-before-act: a grant is only created if the principal
has none on the key, and only revoked if it has one. That's what makes apply()
and revoke() safe to run repeatedly, or on half-applied state.

KMS has no compare-and-swap for grants. Within one reconciler, the find and the
act for a given (key, principal) are done under a lock, but anything else
writing grants on the same key can still race with us.
"""
import asyncio
import re
import weakref

import pulumi

from .clients import IamService, KmsService, ServiceClients
from .declarations import GrantMatch, parse_declarations
from .errors import ConfigurationError, ReconciliationError
from .resolver import IdentityResolver

__all__ = 'GrantReconciler', 'GRANT_OPERATIONS', 'grant_name'

GRANT_OPERATIONS = ('Encrypt', 'Decrypt')


def grant_name(principal_arn):
    """
    A stable grant name for a principal.

    KMS treats a CreateGrant with the same name and parameters as a retry of
    the original, so this keeps retries from making duplicates.
    """
    return re.sub(r'[^a-zA-Z0-9:/_-]', '-', principal_arn)[:256]


class GrantReconciler:
    """
    Reconciles grant declarations against KMS, for one deployment.

    kms and iam default to the real services for the context's region.

    With fail_fast, declarations are handled one at a time and the first error
    propagates as-is. Otherwise up to `concurrency` declarations are handled at
    once, every one is attempted, and any failures are raised together as a
    ReconciliationError at the end. Either way, nothing already done is undone.
    """
    def __init__(self, context, *, kms=None, iam=None, concurrency=4, fail_fast=False):
        if kms is None or iam is None:
            clients = ServiceClients(context.region)
            if kms is None:
                kms = KmsService(clients)
            if iam is None:
                iam = IamService(clients)
        self.context = context
        self.kms = kms
        self.resolver = IdentityResolver(iam, context)
        self.concurrency = max(1, concurrency)
        self.fail_fast = fail_fast
        # Per loop, since locks belong to the loop they were made on
        self._locks = weakref.WeakKeyDictionary()

    async def _locate(self, declaration):
        if not declaration.key_id:
            raise ConfigurationError(f"No KMS key id given ({declaration})")
        principal_arn = await self.resolver.resolve(declaration)
        key_arn = await self.kms.describe_key(declaration.key_id)
        return key_arn, principal_arn

    async def _search(self, key_arn, principal_arn):
        for grant in await self.kms.list_grants(key_arn):
            if grant.get('GranteePrincipal') == principal_arn:
                return GrantMatch(key_arn, principal_arn, grant['GrantId'])
        return GrantMatch(key_arn, principal_arn, None)

    async def find_grant(self, declaration):
        """
        Finds the grant for the declaration's principal on its key, if any.

        Returns a GrantMatch, with grant_id None if there isn't one.
        """
        key_arn, principal_arn = await self._locate(declaration)
        return await self._search(key_arn, principal_arn)

    def _lock_for(self, key_arn, principal_arn):
        locks = self._locks.setdefault(asyncio.get_running_loop(), {})
        return locks.setdefault((key_arn, principal_arn), asyncio.Lock())

    async def _apply_one(self, declaration):
        key_arn, principal_arn = await self._locate(declaration)
        async with self._lock_for(key_arn, principal_arn):
            match = await self._search(key_arn, principal_arn)
            if match.grant_id is not None:
                pulumi.info(f"KMS grant already exists for {principal_arn}")
                return match

            pulumi.info(f"Creating KMS grant for {principal_arn}")
            grant_id = await self.kms.create_grant(
                key_arn, principal_arn, GRANT_OPERATIONS,
                name=grant_name(principal_arn),
            )
            return match._replace(grant_id=grant_id)

    async def _revoke_one(self, declaration):
        key_arn, principal_arn = await self._locate(declaration)
        async with self._lock_for(key_arn, principal_arn):
            match = await self._search(key_arn, principal_arn)
            if match.grant_id is None:
                pulumi.info(f"No KMS grant found for {principal_arn}.")
                return match

            pulumi.info(f"Revoking KMS grant for {principal_arn}")
            await self.kms.revoke_grant(key_arn, match.grant_id)
            return match

    async def _run(self, operation, func, declarations):
        declarations = parse_declarations(declarations)
        if not declarations:
            pulumi.info("No KMS grants declared")
            return []

        if self.fail_fast:
            return [await func(decl) for decl in declarations]

        semaphore = asyncio.Semaphore(self.concurrency)

        async def limited(declaration):
            async with semaphore:
                return await func(declaration)

        results = await asyncio.gather(
            *(limited(decl) for decl in declarations),
            return_exceptions=True,
        )

        failures = []
        for decl, result in zip(declarations, results):
            if isinstance(result, Exception):
                failures.append((decl, result))
            elif isinstance(result, BaseException):
                raise result
        if failures:
            raise ReconciliationError(operation, failures) from failures[0][1]
        return results

    async def apply(self, declarations):
        """
        Creates a grant for every declaration that doesn't have one.

        Returns the GrantMatch for each declaration, with the new grant's id
        where one was created.
        """
        return await self._run('apply', self._apply_one, declarations)

    async def revoke(self, declarations):
        """
        Revokes the grant of every declaration that has one.

        Returns the GrantMatch for each declaration, with the id of the revoked
        grant, or None where there was nothing to revoke.
        """
        return await self._run('revoke', self._revoke_one, declarations)
