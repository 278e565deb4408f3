"""
Creates or revokes a deployment's KMS grants from the command line.

    python -m kmsgrants createKmsGrant --grants grants.json --service svc --stage dev
    python -m kmsgrants revokeKmsGrant --grants grants.json --service svc --stage dev

grants.json holds the kmsGrants declarations. Leaving it out does nothing.
"""
import argparse
import json
import sys

import pulumi

from putils import NoRegionError, get_region, run_sync

from .declarations import DeploymentContext
from .errors import ConfigurationError, KmsGrantsError
from .reconciler import GrantReconciler

COMMANDS = {
    'createKmsGrant': 'apply',
    'revokeKmsGrant': 'revoke',
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog='kmsgrants',
        description="Creates or revokes KMS grants for a deployment's roles.",
    )
    parser.add_argument('command', choices=sorted(COMMANDS))
    parser.add_argument('--grants', help="JSON file with the kmsGrants declarations")
    parser.add_argument('--service', help="Service name, for the default role name")
    parser.add_argument('--stage', help="Stage name, for the default role name")
    parser.add_argument('--region', help="AWS region (default: detected)")
    parser.add_argument(
        '--concurrency', type=int, default=4,
        help="How many declarations to reconcile at once",
    )
    parser.add_argument(
        '--fail-fast', action='store_true',
        help="Stop at the first declaration that fails",
    )
    return parser


def load_grants(path):
    if path is None:
        return None
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, ValueError) as err:
        raise ConfigurationError(f"Unable to read grants from {path}: {err}") from err


def main(argv=None, *, reconciler_class=GrantReconciler):
    args = build_parser().parse_args(argv)

    region = args.region
    if region is None:
        try:
            region = get_region()
        except NoRegionError:
            # boto3 may still find one; the default role name can't
            region = None

    context = DeploymentContext(args.service, args.stage, region)
    try:
        grants = load_grants(args.grants)
        reconciler = reconciler_class(
            context, concurrency=args.concurrency, fail_fast=args.fail_fast,
        )
        operation = getattr(reconciler, COMMANDS[args.command])
        run_sync(operation(grants))
    except KmsGrantsError as err:
        pulumi.error(str(err))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
