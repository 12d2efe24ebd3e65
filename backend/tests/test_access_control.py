"""
Tests for the access control evaluator.
"""

import pytest

from src.core.exceptions import NotFoundOrForbidden
from src.core.security import Identity
from src.services.access_control import Capability, Operation


@pytest.fixture
def report(store, make_identity):
    owner = make_identity("owner@example.com", "Owner")
    report = store.create_report(
        user_id=owner.user_id,
        title="Chest X-Ray",
        report_type="X-Ray",
        report_date="2024-03-01",
        file_path="/uploads/xray.png",
        file_type="image/png",
    )
    return owner, report


def test_owner_may_do_everything(access, report):
    owner, rep = report
    for operation in Operation:
        found, decision = access.evaluate(owner, rep.id, operation)
        assert found.id == rep.id
        assert decision.capability == Capability.OWNER
    assert access.evaluate(owner, rep.id, Operation.READ)[1].is_owner


def test_grantee_may_only_read(access, store, report, make_identity):
    owner, rep = report
    viewer = make_identity("viewer@example.com")
    store.create_share(rep.id, owner.user_id, viewer.email, viewer.user_id)

    _, decision = access.evaluate(viewer, rep.id, Operation.READ)
    assert decision.permitted
    assert decision.capability == Capability.SHARED_READ_ONLY
    assert decision.operations == frozenset({Operation.READ})

    for operation in (Operation.WRITE, Operation.DELETE, Operation.SHARE):
        assert access.permit(viewer, rep.id, operation) is False


def test_email_only_grant_applies_to_later_account(access, store, report, make_identity):
    owner, rep = report
    store.create_share(rep.id, owner.user_id, "Later@Example.com")

    newcomer = make_identity("later@example.com")

    assert access.permit(newcomer, rep.id, Operation.READ)


def test_grant_matches_on_user_id_when_email_differs(access, store, report, make_identity):
    owner, rep = report
    viewer = make_identity("viewer@example.com")
    store.create_share(rep.id, owner.user_id, viewer.email, viewer.user_id)

    renamed = Identity(user_id=viewer.user_id, email="renamed@example.com")

    assert access.permit(renamed, rep.id, Operation.READ)


def test_stranger_and_missing_report_are_indistinguishable(access, report, make_identity):
    _, rep = report
    stranger = make_identity("stranger@example.com")

    with pytest.raises(NotFoundOrForbidden) as denied:
        access.require(stranger, rep.id, Operation.READ)
    with pytest.raises(NotFoundOrForbidden) as missing:
        access.require(stranger, "no-such-report", Operation.READ)

    assert denied.value.to_dict() == missing.value.to_dict()
    assert denied.value.status_code == 404


def test_denied_evaluation_returns_no_report(access, report, make_identity):
    _, rep = report
    stranger = make_identity("stranger@example.com")

    found, decision = access.evaluate(stranger, rep.id, Operation.READ)

    assert found is None
    assert not decision.permitted
    assert decision.operations == frozenset()
