import pytest

from use_cases.session_models import identity_from_payload, is_admin, merge_identity


def test_identity_from_payload_reads_backend_shape() -> None:
    identity = identity_from_payload({
        "_id": "65f0c0ffee",
        "firstName": "Grace",
        "lastName": "Hopper",
        "email": "grace@example.com",
        "role": "Organizer",
        "profileImage": "https://cdn.example.com/grace.png",
    })
    assert identity.id == "65f0c0ffee"
    assert identity.full_name == "Grace Hopper"
    assert identity.role == "organizer"
    assert identity.profile_image_ref == "https://cdn.example.com/grace.png"


def test_identity_from_payload_falls_back_to_user_type() -> None:
    identity = identity_from_payload({"id": 7, "userType": "attendee"})
    assert identity.id == "7"
    assert identity.role == "attendee"


def test_unknown_role_is_downgraded() -> None:
    assert identity_from_payload({"id": "1", "role": "superuser"}).role == "attendee"


def test_identity_requires_id() -> None:
    with pytest.raises(ValueError):
        identity_from_payload({"email": "x@example.com"})


def test_merge_identity_ignores_id_and_role() -> None:
    current = identity_from_payload({"id": "1", "firstName": "A", "role": "attendee"})
    merged = merge_identity(current, {"id": "2", "role": "admin", "phoneNumber": "+15550100"})
    assert merged.id == "1"
    assert merged.role == "attendee"
    assert merged.phone_number == "+15550100"
    assert current.phone_number is None


def test_is_admin() -> None:
    admin = identity_from_payload({"id": "1", "role": "admin"})
    organizer = identity_from_payload({"id": "2", "role": "organizer"})
    assert is_admin(admin) is True
    assert is_admin(organizer) is False
