import pytest

from gambit.config import ApprovalPolicy
from gambit.tools.approval import ApprovalRequiredError, approval_guard


def test_never_allows() -> None:
    approval_guard(ApprovalPolicy.NEVER, "apply_patch")


def test_on_request_blocks_unrequested_writes() -> None:
    with pytest.raises(ApprovalRequiredError, match="not explicitly requested"):
        approval_guard(ApprovalPolicy.ON_REQUEST, "apply_patch")


def test_on_request_allows_requested_writes() -> None:
    approval_guard(ApprovalPolicy.ON_REQUEST, "apply_patch", requested=True)


def test_always_blocks_even_when_requested() -> None:
    with pytest.raises(ApprovalRequiredError, match="apply_patch"):
        approval_guard(ApprovalPolicy.ALWAYS, "apply_patch", requested=True)
