"""
Hooks grant reconciliation into a pulumi deployment.

KmsGrants is a dynamic resource. Creating it applies the grants; deleting it,
on destroy or when it's dropped from the program, revokes them. Put whatever
the grants need (the roles, the keys) in its depends_on, so that it's created
after them and deleted before them.
"""
import collections.abc
import uuid

import pulumi
from pulumi.dynamic import (
    CreateResult, DiffResult, Resource, ResourceProvider, UpdateResult,
)

from putils import get_region, run_sync

from .declarations import DeploymentContext, GrantDeclaration, parse_declarations
from .reconciler import GrantReconciler

__all__ = 'KmsGrants', 'KmsGrantsProvider'

CONTEXT_INPUTS = ('service', 'stage', 'region')


def _reconciler(props):
    context = DeploymentContext(*(props.get(name) for name in CONTEXT_INPUTS))
    return GrantReconciler(context)


def _outputs(props, matches):
    outs = {name: props.get(name) for name in ('grants',) + CONTEXT_INPUTS}
    outs['grant_ids'] = [match.grant_id for match in matches]
    return outs


class KmsGrantsProvider(ResourceProvider):
    def create(self, props):
        matches = run_sync(_reconciler(props).apply(props.get('grants')))
        return CreateResult(id_=uuid.uuid4().hex, outs=_outputs(props, matches))

    def diff(self, _id, olds, news):
        changed = [
            name for name in ('grants',) + CONTEXT_INPUTS
            if olds.get(name) != news.get(name)
        ]
        # Another deployment means other default roles; start over
        replaces = [name for name in changed if name in CONTEXT_INPUTS]
        return DiffResult(
            changes=bool(changed),
            replaces=replaces,
            delete_before_replace=True,
        )

    def update(self, _id, olds, news):
        old = parse_declarations(olds.get('grants'))
        new = parse_declarations(news.get('grants'))
        reconciler = _reconciler(news)

        dropped = [decl for decl in old if decl not in new]
        if dropped:
            run_sync(reconciler.revoke(dropped))
        matches = run_sync(reconciler.apply(new))
        return UpdateResult(outs=_outputs(news, matches))

    def delete(self, _id, props):
        run_sync(_reconciler(props).revoke(props.get('grants')))


def _grant_inputs(grants):
    if not grants:
        return []
    if isinstance(grants, (GrantDeclaration, collections.abc.Mapping)):
        grants = [grants]
    return [
        grant.to_config() if isinstance(grant, GrantDeclaration) else dict(grant)
        for grant in grants
    ]


class KmsGrants(Resource):
    """
    The KMS grants of a deployment.

    grants takes the same shapes as the kmsGrants config: a mapping, a list of
    mappings, or GrantDeclarations. Values may be Outputs (eg a role's arn).

    service, stage, and region default to the pulumi project, the stack, and
    the configured AWS region.

    Nothing is rolled back. If create fails partway, the grants it did make
    belong to no resource, and a later destroy won't revoke them. Fix the
    error and deploy again; apply picks them up.
    """
    def __init__(self, name, grants, *, service=None, stage=None, region=None, opts=None):
        props = {
            'grants': _grant_inputs(grants),
            'service': service or pulumi.get_project(),
            'stage': stage or pulumi.get_stack(),
            'region': region or get_region(),
            'grant_ids': None,
        }
        super().__init__(KmsGrantsProvider(), name, props, opts)
