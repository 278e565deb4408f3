"""
Access to KMS and IAM.

The services here expose just the calls the reconciler needs, as coroutines.
boto3 itself blocks, so the calls run in the executor.
"""
import threading

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
import pulumi

from putils import background, localstack

from .errors import NotFoundError

__all__ = 'ServiceClients', 'KmsService', 'IamService'


def _error_code(err):
    return err.response.get('Error', {}).get('Code')


class ServiceClients:
    """
    boto3 clients for one region, each built on first use and then reused.
    """
    def __init__(self, region=None, *, max_attempts=5, session=None):
        self.region = region
        self.max_attempts = max_attempts
        self._session = session
        self._clients = {}
        self._lock = threading.Lock()

    def _client(self, service):
        # Calls come in from executor threads
        with self._lock:
            if service not in self._clients:
                if self._session is None:
                    self._session = boto3.session.Session()
                region = self.region
                if region is None and localstack.is_local():
                    region = localstack.REGION
                pulumi.debug(f"Creating {service} client for region {region}")
                self._clients[service] = self._session.client(
                    service,
                    region_name=region,
                    config=Config(retries={
                        'max_attempts': self.max_attempts,
                        'mode': 'standard',
                    }),
                    **localstack.client_kwargs(service),
                )
            return self._clients[service]

    @property
    def kms(self):
        return self._client('kms')

    @property
    def iam(self):
        return self._client('iam')


class KmsService:
    def __init__(self, clients):
        self.clients = clients

    @background
    def describe_key(self, key_id):
        """
        Gets the full ARN of a key, given its id, ARN, or alias.
        """
        pulumi.debug(f"Describing KMS key {key_id}")
        try:
            resp = self.clients.kms.describe_key(KeyId=key_id)
        except ClientError as err:
            if _error_code(err) == 'NotFoundException':
                raise NotFoundError(f"KMS key {key_id} does not exist") from err
            raise
        return resp['KeyMetadata']['Arn']

    @background
    def list_grants(self, key_arn):
        """
        Gets every grant on the key, across all pages.
        """
        paginator = self.clients.kms.get_paginator('list_grants')
        grants = []
        try:
            for page in paginator.paginate(KeyId=key_arn):
                grants.extend(page.get('Grants', []))
        except ClientError as err:
            if _error_code(err) == 'NotFoundException':
                raise NotFoundError(f"KMS key {key_arn} does not exist") from err
            raise
        pulumi.debug(f"Found {len(grants)} grant(s) on {key_arn}")
        return grants

    @background
    def create_grant(self, key_arn, grantee_principal, operations, name=None):
        """
        Creates a grant, returning its id.

        Retrying with the same name returns the existing grant instead of
        making another.
        """
        params = {
            'KeyId': key_arn,
            'GranteePrincipal': grantee_principal,
            'Operations': list(operations),
        }
        if name:
            params['Name'] = name
        resp = self.clients.kms.create_grant(**params)
        return resp['GrantId']

    @background
    def revoke_grant(self, key_arn, grant_id):
        self.clients.kms.revoke_grant(KeyId=key_arn, GrantId=grant_id)


class IamService:
    def __init__(self, clients):
        self.clients = clients

    @background
    def get_role(self, role_name):
        """
        Gets the ARN of the named role.
        """
        pulumi.debug(f"Looking up IAM role {role_name}")
        try:
            resp = self.clients.iam.get_role(RoleName=role_name)
        except ClientError as err:
            if _error_code(err) == 'NoSuchEntity':
                raise NotFoundError(f"IAM role {role_name} does not exist") from err
            raise
        return resp['Role']['Arn']
