"""
Works out which role a declaration is granting to.
"""
import pulumi

from .errors import ConfigurationError

__all__ = 'IdentityResolver', 'default_role_name'

DEFAULT_ROLE_FORMAT = "{service}-{stage}-{region}-lambdaRole"


def default_role_name(context):
    """
    The name of the deployment's default lambda role.
    """
    for field in ('service', 'stage', 'region'):
        value = getattr(context, field)
        if not value or not isinstance(value, str):
            raise ConfigurationError(
                f"{field.capitalize()} is undefined, cannot derive the default role name"
            )
    return DEFAULT_ROLE_FORMAT.format(**context._asdict())


class IdentityResolver:
    def __init__(self, iam, context):
        self.iam = iam
        self.context = context

    async def resolve(self, declaration):
        """
        Gets the principal ARN for the declaration.

        An explicit ARN is used as-is. Otherwise the named role, or the default
        lambda role, is looked up in IAM. Nothing is cached, so this always
        reflects what IAM currently says.
        """
        if declaration.role_arn:
            return declaration.role_arn

        role_name = declaration.role_name
        if not role_name:
            role_name = default_role_name(self.context)
            pulumi.info(
                "Neither 'lambdaRoleArn' nor 'lambdaRoleName' defined, using "
                f"default format for role name: {DEFAULT_ROLE_FORMAT} ({role_name})"
            )

        return await self.iam.get_role(role_name)
