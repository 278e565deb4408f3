"""
localstack support, for deploying against a local mock of AWS.

Turned on by setting STAGE=local.
"""
import os

import pulumi_aws

# Only the services this project talks to
ENDPOINTS = {
    'iam': "http://localhost:4593",
    'kms': "http://localhost:4584",
    'sts': "http://localhost:4592",
}

REGION = 'us-east-1'
ACCESS_KEY = "mockAccessKey"
SECRET_KEY = "mockSecretKey"

_provider = None


def is_local():
    return os.environ.get('STAGE') == 'local'


def client_kwargs(service):
    """
    Extra boto3.client() arguments for the given service, if using localstack.
    """
    if not is_local():
        return {}
    return {
        'endpoint_url': ENDPOINTS[service],
        'aws_access_key_id': ACCESS_KEY,
        'aws_secret_access_key': SECRET_KEY,
    }


def get_provider():
    """
    Gets the pulumi provider pointed at localstack, or None if not using it.
    """
    global _provider
    if not is_local():
        return None
    if _provider is None:
        _provider = pulumi_aws.Provider(
            "localstack",
            skip_credentials_validation=True,
            skip_metadata_api_check=True,
            access_key=ACCESS_KEY,
            secret_key=SECRET_KEY,
            region=REGION,
            endpoints=[dict(ENDPOINTS)],
        )
    return _provider
