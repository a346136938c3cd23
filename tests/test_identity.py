import pytest

from springlib.errors import Unauthorized
from springlib.models.user import Role
from springlib.utils.auth import Identity


@pytest.mark.parametrize("raw, expected", [
    ("ADMIN", Role.ADMIN),
    ("ROLE_ADMIN", Role.ADMIN),
    ("member", Role.MEMBER),
    ("ROLE_USER", Role.MEMBER),
])
def test_role_parse(raw, expected):
    assert Role.parse(raw) == expected


def test_identity_from_claims():
    ident = Identity.from_claims("12", {"role": "ADMIN", "userId": 12})
    assert ident == Identity(user_id=12, role=Role.ADMIN)
    assert ident.is_admin and not ident.is_member

    # falls back to the token subject
    assert Identity.from_claims("5", {"role": "MEMBER"}).user_id == 5


@pytest.mark.parametrize("subject, claims", [
    ("1", {"role": "LIBRARIAN"}),
    ("1", {}),
    (None, {"role": "MEMBER"}),
])
def test_identity_from_bad_claims(subject, claims):
    with pytest.raises(Unauthorized):
        Identity.from_claims(subject, claims)
