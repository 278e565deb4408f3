"""
The desired state: which roles get to use which keys.
"""
import collections.abc
import typing

from .errors import ConfigurationError

__all__ = 'GrantDeclaration', 'DeploymentContext', 'GrantMatch', 'parse_declarations'

# Config key -> GrantDeclaration field
CONFIG_KEYS = {
    'kmsKeyId': 'key_id',
    'lambdaRoleArn': 'role_arn',
    'lambdaRoleName': 'role_name',
}


class GrantDeclaration(typing.NamedTuple):
    """
    One desired authorization of a role on a key.

    If both role_arn and role_name are given, role_arn wins. If neither is, the
    default lambda role for the deployment is used.
    """
    key_id: str
    role_arn: typing.Optional[str] = None
    role_name: typing.Optional[str] = None

    @classmethod
    def from_config(cls, entry):
        if not isinstance(entry, collections.abc.Mapping):
            raise ConfigurationError(
                f"KMS grant declarations must be mappings, got {entry!r}"
            )
        unknown = set(entry) - set(CONFIG_KEYS)
        if unknown:
            raise ConfigurationError(
                f"Unknown KMS grant option(s): {', '.join(sorted(unknown))}"
            )
        # Empty strings count as not given
        return cls(**{
            field: entry.get(key) or None
            for key, field in CONFIG_KEYS.items()
        })

    def to_config(self):
        return {
            key: getattr(self, field)
            for key, field in CONFIG_KEYS.items()
            if getattr(self, field)
        }

    def __str__(self):
        role = self.role_arn or self.role_name or '<default role>'
        return f"{self.key_id or '<no key>'} -> {role}"


class DeploymentContext(typing.NamedTuple):
    """
    Where we're deploying. Used to derive the default role name.
    """
    service: typing.Optional[str] = None
    stage: typing.Optional[str] = None
    region: typing.Optional[str] = None


class GrantMatch(typing.NamedTuple):
    """
    The result of looking for a declaration's grant.

    grant_id is None if the principal has no grant on the key.
    """
    key_arn: str
    principal_arn: str
    grant_id: typing.Optional[str]


def parse_declarations(config):
    """
    Turns the kmsGrants config into a list of GrantDeclarations.

    Accepts nothing, a single declaration mapping, or a list of them.
    """
    if not config:
        return []
    if isinstance(config, GrantDeclaration):
        return [config]
    if isinstance(config, collections.abc.Mapping):
        return [GrantDeclaration.from_config(config)]
    if isinstance(config, collections.abc.Sequence) and not isinstance(config, str):
        return [
            entry if isinstance(entry, GrantDeclaration) else GrantDeclaration.from_config(entry)
            for entry in config
        ]
    raise ConfigurationError(
        f"kmsGrants must be a mapping or a list of mappings, got {config!r}"
    )
