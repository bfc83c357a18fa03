from __future__ import annotations

import pytest

from iam_stubs import DummyIamClient


@pytest.fixture
def iam_client() -> DummyIamClient:
    return DummyIamClient()
