"""
Tests for share grants.
"""

import pytest

from src.core.exceptions import ConflictError, NotFoundOrForbidden, ValidationError
from src.services.access_control import Operation


@pytest.fixture
def owner_report(upload, make_identity):
    alice = make_identity("alice@example.com", "Alice")
    result = upload(alice, title="Chest X-Ray")
    return alice, result.report_id


def test_share_with_registered_user_records_user_id(sharing, owner_report, make_identity):
    alice, report_id = owner_report
    bob = make_identity("bob@example.com", "Bob")

    share = sharing.share(report_id, alice, "  BOB@example.com ")

    assert share.shared_with_email == "bob@example.com"
    assert share.shared_with_user_id == bob.user_id
    assert share.access_level == "read"
    assert share.shared_by == alice.user_id


def test_email_only_grant_reaches_later_account(
    sharing, access, owner_report, make_identity
):
    alice, report_id = owner_report
    share = sharing.share(report_id, alice, "dana@example.com")
    assert share.shared_with_user_id is None

    dana = make_identity("dana@example.com", "Dana")

    [(grant, report, owner)] = sharing.list_received(dana)
    assert grant.id == share.id
    assert report.id == report_id
    assert owner.full_name == "Alice"
    assert access.permit(dana, report_id, Operation.READ)


def test_duplicate_share_is_conflict(sharing, owner_report, make_identity):
    alice, report_id = owner_report
    make_identity("bob@example.com")
    sharing.share(report_id, alice, "bob@example.com")

    with pytest.raises(ConflictError):
        sharing.share(report_id, alice, "Bob@Example.com")


def test_concurrent_duplicate_share_is_conflict(
    sharing, store, owner_report, make_identity, monkeypatch
):
    alice, report_id = owner_report
    make_identity("bob@example.com")
    # both requests pass the lookup before either grant is written
    monkeypatch.setattr(store, "find_share", lambda report_id, email: None)
    sharing.share(report_id, alice, "bob@example.com")

    with pytest.raises(ConflictError):
        sharing.share(report_id, alice, "bob@example.com")

    assert len(store.list_shares_for_report(report_id)) == 1


@pytest.mark.parametrize("email", ["", "not-an-email", None])
def test_share_requires_valid_email(sharing, owner_report, email):
    alice, report_id = owner_report
    with pytest.raises(ValidationError):
        sharing.share(report_id, alice, email)


def test_cannot_share_with_self(sharing, owner_report):
    alice, report_id = owner_report
    with pytest.raises(ValidationError):
        sharing.share(report_id, alice, "ALICE@example.com")


def test_only_owner_may_share(sharing, owner_report, make_identity):
    alice, report_id = owner_report
    bob = make_identity("bob@example.com")
    sharing.share(report_id, alice, bob.email)

    with pytest.raises(NotFoundOrForbidden):
        sharing.share(report_id, bob, "carol@example.com")
    with pytest.raises(NotFoundOrForbidden):
        sharing.list_for_report(report_id, bob)


def test_revoke_by_grantor_only(sharing, access, owner_report, make_identity):
    alice, report_id = owner_report
    bob = make_identity("bob@example.com")
    share = sharing.share(report_id, alice, bob.email)

    with pytest.raises(NotFoundOrForbidden):
        sharing.revoke(share.id, bob)
    assert access.permit(bob, report_id, Operation.READ)

    sharing.revoke(share.id, alice)
    assert not access.permit(bob, report_id, Operation.READ)

    with pytest.raises(NotFoundOrForbidden):
        sharing.revoke(share.id, alice)


def test_listings(sharing, owner_report, make_identity):
    alice, report_id = owner_report
    make_identity("bob@example.com", "Bob")
    sharing.share(report_id, alice, "bob@example.com")
    sharing.share(report_id, alice, "erin@example.com")

    sent = sharing.list_sent(alice)
    assert {(s.shared_with_email, name) for s, _, name in sent} == {
        ("bob@example.com", "Bob"),
        ("erin@example.com", None),
    }
    assert all(report.id == report_id for _, report, _ in sent)

    for_report = sharing.list_for_report(report_id, alice)
    assert len(for_report) == 2


def test_deleted_recipient_keeps_access_by_email(
    sharing, store, access, owner_report, make_identity
):
    alice, report_id = owner_report
    bob = make_identity("bob@example.com")
    share = sharing.share(report_id, alice, bob.email)

    store.delete_user(bob.user_id)

    assert store.get_share(share.id).shared_with_user_id is None
    returning = make_identity("bob@example.com")
    assert access.permit(returning, report_id, Operation.READ)
