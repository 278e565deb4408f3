"""
Shared fixtures.

Async tests are marked with pytest.mark.asyncio. The AWS services are replaced
by the in-memory fakes in tests/fakes.py, except in test_clients.py, which
stubs botocore directly.
"""
from __future__ import annotations

import pytest

from kmsgrants import DeploymentContext, GrantReconciler
from tests.fakes import FakeIam, FakeKms

KEY_ARN = "arn:aws:kms:us-east-1:123456789012:key/1234abcd-12ab-34cd-56ef-1234567890ab"
OTHER_KEY_ARN = "arn:aws:kms:us-east-1:123456789012:key/0987dcba-09fe-87dc-65ba-ab0987654321"
DEFAULT_ROLE_ARN = "arn:aws:iam::123456789012:role/svc-dev-us-east-1-lambdaRole"
WORKER_ROLE_ARN = "arn:aws:iam::123456789012:role/worker"


@pytest.fixture
def context() -> DeploymentContext:
    return DeploymentContext(service="svc", stage="dev", region="us-east-1")


@pytest.fixture
def kms() -> FakeKms:
    kms = FakeKms()
    kms.add_key(KEY_ARN, "alias/app", "1234abcd-12ab-34cd-56ef-1234567890ab")
    kms.add_key(OTHER_KEY_ARN)
    return kms


@pytest.fixture
def iam() -> FakeIam:
    return FakeIam({
        "svc-dev-us-east-1-lambdaRole": DEFAULT_ROLE_ARN,
        "worker": WORKER_ROLE_ARN,
    })


@pytest.fixture
def reconciler(context, kms, iam) -> GrantReconciler:
    return GrantReconciler(context, kms=kms, iam=iam)
