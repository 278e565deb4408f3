import json

import pulumi
from pulumi_aws import iam

from putils import opts, get_region
from kmsgrants import default_role_name, DeploymentContext
from kmsgrants.provider import KmsGrants

config = pulumi.Config('kmsgrants')

context = DeploymentContext(pulumi.get_project(), pulumi.get_stack(), get_region())

depends_on = []
if config.get_bool('createRole'):
    # The role grants fall back to when they don't name one
    role_name = default_role_name(context)
    role = iam.Role(
        role_name,
        name=role_name,
        assume_role_policy=json.dumps({
            "Version": "2012-10-17",
            "Statement": [{
                "Effect": "Allow",
                "Principal": {"Service": "lambda.amazonaws.com"},
                "Action": "sts:AssumeRole",
            }],
        }),
        **opts(),
    )
    depends_on.append(role)
    pulumi.export('role_arn', role.arn)

grants = KmsGrants(
    'kms-grants',
    config.get_object('kmsGrants'),
    service=context.service,
    stage=context.stage,
    region=context.region,
    opts=pulumi.ResourceOptions(depends_on=depends_on),
)

pulumi.export('grant_ids', grants.grant_ids)
