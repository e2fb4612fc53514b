"""
tests/test_groups.py
Group gifts: creation with invitations, legacy column handling, listing,
participant reconciliation on update, forking shared groups and share links.
"""

from datetime import date

import pytest

from app.core.colors import PASTEL_COLORS
from app.core.errors import AccessDeniedError, NotFoundError, ValidationError
from app.modules.groups import codec
from app.modules.groups.schemas import GroupCreate, GroupUpdate
from app.modules.groups.service import GroupService, split_evenly
from tests.fakes import add_profile


@pytest.fixture
def service(supabase, realtime):
    return GroupService(supabase, realtime=realtime)


def _create(service, owner, participants=("friend@example.com", "stranger@example.com"), **overrides):
    fields = {
        "name": "Espresso machine",
        "description": "Wedding",
        "amount": 90,
        "currency": "EUR",
        "date": date(2025, 9, 20),
        "participants": list(participants),
    }
    fields.update(overrides)
    return service.create_group(GroupCreate(**fields), owner)


def _participant_rows(supabase, group_id):
    return {row["email"]: row for row in supabase.rows("group_participants") if row["group_id"] == group_id}


# Creation

def test_create_group_inserts_creator_and_invitees(service, supabase, owner, friend):
    group = _create(service, owner)

    rows = _participant_rows(supabase, group.id)
    assert set(rows) == {"owner@example.com", "friend@example.com", "stranger@example.com"}
    assert all(row["contribution_amount"] == 30 for row in rows.values())

    creator = rows["owner@example.com"]
    assert creator["participation_status"] == "agreed"
    assert creator["agreed_at"] is not None
    assert creator["user_id"] == owner["id"]

    assert rows["friend@example.com"]["participation_status"] == "pending"
    assert rows["friend@example.com"]["user_id"] == friend["id"]
    assert rows["stranger@example.com"]["user_id"] is None

    assert group.participants[0] == "owner@example.com"
    assert group.color in PASTEL_COLORS


def test_create_group_writes_both_column_names(service, supabase, owner):
    group = _create(service, owner, image_url="https://img.example.com/espresso.jpg")

    row = supabase.rows("gift_groups")[0]
    assert row["id"] == group.id
    assert row["name"] == row["title"] == "Espresso machine"
    assert row["description"] == row["occasion"] == "Wedding"
    assert row["amount"] == row["price"] == 90
    assert row["image_url"] == row["product_image_url"] == "https://img.example.com/espresso.jpg"
    assert row["date"] == "2025-09-20T00:00:00+00:00"


def test_create_group_invites_registered_invitees_only(service, supabase, owner, friend):
    group = _create(service, owner)

    invitations = supabase.calls("create_notification")
    assert len(invitations) == 1
    invitation = invitations[0]
    assert invitation["p_user_id"] == friend["id"]
    assert invitation["p_title"] == "Group Gift Invitation"
    assert invitation["p_requires_action"] is True
    assert invitation["p_action_url"] == f"/share/group/{group.id}"
    assert invitation["p_metadata"]["group_id"] == group.id


def test_one_failed_invitation_does_not_block_the_rest(service, supabase, owner, friend):
    other = add_profile(supabase, "other@example.com")

    def create_notification(params):
        if params["p_user_id"] == friend["id"]:
            raise RuntimeError("notification service unavailable")
        return "notification-id"

    supabase.rpc_handlers["create_notification"] = create_notification
    group = _create(service, owner, participants=["friend@example.com", "other@example.com"])

    recipients = [params["p_user_id"] for params in supabase.calls("create_notification")]
    assert recipients == [friend["id"], other["id"]]
    assert len(_participant_rows(supabase, group.id)) == 3


def test_duplicate_and_creator_invites_are_collapsed(service, supabase, owner):
    group = _create(service, owner, participants=["Friend@Example.com", "friend@example.com", "owner@example.com"], amount=100)
    rows = _participant_rows(supabase, group.id)
    assert set(rows) == {"owner@example.com", "friend@example.com"}
    assert rows["friend@example.com"]["contribution_amount"] == 50


def test_create_group_requires_fields(service, supabase, owner):
    with pytest.raises(ValidationError) as exc:
        service.create_group(GroupCreate(name="Espresso machine", amount=90), owner)
    assert exc.value.message == "Missing required fields"
    assert supabase.rows("gift_groups") == []


def test_create_group_requires_user(service, supabase):
    with pytest.raises(AccessDeniedError) as exc:
        service.create_group(GroupCreate(name="x", description="y", amount=1, currency="EUR"), None)
    assert exc.value.code == "UNAUTHENTICATED"
    with pytest.raises(AccessDeniedError):
        service.create_group(GroupCreate(name="x", description="y", amount=1, currency="EUR"), {"id": "u1"})


def test_split_evenly():
    assert split_evenly(90, 3) == 30
    assert split_evenly(100, 3) == 33.33
    assert split_evenly(10, 0) == 0


# Codec

def test_codec_reads_legacy_only_rows():
    group = codec.from_row({
        "id": "g1",
        "user_id": "u1",
        "title": "Bike",
        "occasion": "Birthday",
        "price": 250,
        "product_image_url": "https://img.example.com/bike.jpg",
        "currency": "USD",
        "participants": ["a@example.com"],
    })
    assert group.name == "Bike"
    assert group.description == "Birthday"
    assert group.amount == 250
    assert group.image_url == "https://img.example.com/bike.jpg"
    assert group.participants == ["a@example.com"]


def test_codec_prefers_new_columns():
    group = codec.from_row({"id": "g1", "user_id": "u1", "name": "New", "title": "Old", "amount": 5, "price": 7})
    assert group.name == "New"
    assert group.amount == 5


def test_codec_round_trip():
    fields = {"name": "Bike", "description": "Birthday", "amount": 250, "currency": "USD", "date": date(2025, 3, 1)}
    row = {"id": "g1", "user_id": "u1", **codec.to_row(fields)}
    group = codec.from_row(row)
    assert (group.name, group.description, group.amount, group.currency) == ("Bike", "Birthday", 250, "USD")
    assert group.date.isoformat() == "2025-03-01T00:00:00+00:00"
    assert row["title"] == "Bike" and row["price"] == 250


def test_codec_partial_update_only_touches_given_fields():
    assert codec.to_row({"name": "Renamed"}) == {"name": "Renamed", "title": "Renamed"}


# Reads

def test_get_groups_includes_agreed_shared_groups(service, supabase, owner, friend):
    own = _create(service, owner, participants=["friend@example.com"])
    agreed = _create(service, friend, participants=["owner@example.com"], name="Agreed")
    pending = _create(service, friend, participants=["owner@example.com"], name="Pending")

    for row in supabase.rows("group_participants"):
        if row["group_id"] == agreed.id and row["email"] == "owner@example.com":
            row["participation_status"] = "agreed"
            row["user_id"] = owner["id"]

    groups = service.get_groups(owner["id"], owner["email"])
    ids = [g.id for g in groups]
    assert ids == [own.id, agreed.id]
    assert pending.id not in ids

    shared = groups[1]
    assert shared.participants[0] == "friend@example.com"
    assert "owner@example.com" in shared.participants


def test_get_groups_falls_back_to_legacy_participants(service, supabase, owner):
    supabase.seed("gift_groups", {
        "user_id": owner["id"],
        "title": "Old group",
        "price": 40,
        "participants": ["someone@example.com", "owner@example.com"],
    })
    groups = service.get_groups(owner["id"])
    assert groups[0].name == "Old group"
    assert groups[0].participants == ["owner@example.com", "someone@example.com"]


def test_get_group_by_id(service, owner):
    group = _create(service, owner)
    fetched = service.get_group_by_id(group.id)
    assert fetched.name == "Espresso machine"
    assert fetched.participants[0] == "owner@example.com"
    assert service.get_group_by_id("missing") is None


def test_created_group_reads_back_through_both_column_names(service, owner):
    created = _create(service, owner, image_url="https://img.example.com/espresso.jpg", comments="Red one")

    fetched = service.get_group_by_id(created.id)

    assert fetched.name == "Espresso machine"
    assert fetched.description == "Wedding"
    assert fetched.amount == 90
    assert fetched.currency == "EUR"
    assert fetched.image_url == "https://img.example.com/espresso.jpg"
    assert fetched.comments == "Red one"
    assert fetched.date.isoformat() == "2025-09-20T00:00:00+00:00"


# Updates

def test_update_group_reconciles_participants(service, supabase, owner, friend):
    group = _create(service, owner, participants=["friend@example.com", "stranger@example.com"])
    supabase.rpc_calls.clear()
    newcomer = add_profile(supabase, "newcomer@example.com")

    updated = service.update_group(
        group.id,
        GroupUpdate(name="Coffee grinder", participants=["friend@example.com", "newcomer@example.com"]),
        owner["id"],
    )

    rows = _participant_rows(supabase, group.id)
    assert set(rows) == {"owner@example.com", "friend@example.com", "newcomer@example.com"}
    assert rows["newcomer@example.com"]["participation_status"] == "pending"
    assert rows["newcomer@example.com"]["contribution_amount"] == 0

    assert [p["p_user_id"] for p in supabase.calls("create_notification")] == [newcomer["id"]]
    assert supabase.calls("calculate_group_contributions") == [{"p_group_id": group.id}]

    row = next(r for r in supabase.rows("gift_groups") if r["id"] == group.id)
    assert row["name"] == row["title"] == "Coffee grinder"
    assert updated.name == "Coffee grinder"


def test_update_group_never_removes_creator(service, supabase, owner):
    group = _create(service, owner, participants=["friend@example.com"])
    service.update_group(group.id, GroupUpdate(participants=[]), owner["id"])
    assert set(_participant_rows(supabase, group.id)) == {"owner@example.com"}


def test_update_group_without_participants_keeps_them(service, supabase, owner):
    group = _create(service, owner, participants=["friend@example.com"])
    supabase.rpc_calls.clear()
    service.update_group(group.id, GroupUpdate(comments="Ask about colour"), owner["id"])
    assert len(_participant_rows(supabase, group.id)) == 2
    assert supabase.calls("calculate_group_contributions") == []


def test_update_group_is_owner_scoped(service, owner, friend):
    group = _create(service, owner)
    with pytest.raises(NotFoundError):
        service.update_group(group.id, GroupUpdate(name="Hijacked"), friend["id"])


def test_delete_group(service, supabase, owner, friend):
    group = _create(service, owner)
    assert service.delete_group(friend["id"], group.id) is False
    assert service.delete_group(owner["id"], group.id) is True
    assert service.get_group_by_id(group.id) is None


# Sharing

def test_copy_shared_group_forks_for_new_owner(service, supabase, owner, friend):
    source = _create(service, owner)

    fork = service.copy_shared_group(source.id, {"id": friend["id"], "email": friend["email"]})

    assert fork.id != source.id
    assert fork.user_id == friend["id"]
    assert fork.color == source.color
    assert fork.name == source.name

    rows = _participant_rows(supabase, fork.id)
    assert set(rows) == {"friend@example.com", "owner@example.com", "stranger@example.com"}
    assert rows["friend@example.com"]["participation_status"] == "agreed"
    assert rows["owner@example.com"]["participation_status"] == "pending"
    assert all(row["contribution_amount"] == 30 for row in rows.values())

    # the source group is untouched
    assert len(_participant_rows(supabase, source.id)) == 3
    assert service.get_group_by_id(source.id).user_id == owner["id"]


def test_copy_missing_group(service, friend):
    with pytest.raises(NotFoundError):
        service.copy_shared_group("missing", friend)


def test_accept_group_invitation(service, supabase, owner, friend):
    source = _create(service, owner)
    notification = supabase.seed("mailbox_notifications", {
        "user_id": friend["id"],
        "title": "Group Gift Invitation",
        "message": "owner@example.com invited you",
        "type": "info",
        "status": "active",
        "metadata": {"group_id": source.id, "inviter_email": "owner@example.com"},
    })[0]

    group = service.accept_group_invitation(notification["id"], friend)

    assert group.user_id == friend["id"]
    assert supabase.calls("mark_notification_read") == [{"p_notification_id": notification["id"]}]


def test_accept_unknown_invitation(service, friend):
    with pytest.raises(NotFoundError):
        service.accept_group_invitation("missing", friend)


def test_build_share_links(service, owner):
    group = _create(service, owner)
    links = service.build_share_links(group)
    assert links.url == f"https://gifts.example.com/share/group/{group.id}"
    assert links.facebook.startswith("https://www.facebook.com/sharer/sharer.php?u=https%3A%2F%2Fgifts.example.com")
    assert "intent/tweet" in links.twitter
    assert links.whatsapp.startswith("https://api.whatsapp.com/send?text=")
