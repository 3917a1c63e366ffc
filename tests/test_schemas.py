"""Request DTO validation."""

import pytest
from pydantic import ValidationError

from app.schemas.vendor import VendorUpdate


@pytest.mark.parametrize("email", ["foo@bar..com", "no-at-sign.com", "two@@example.com", "a b@example.com"])
def test_malformed_email_rejected(email):
    with pytest.raises(ValidationError) as exc:
        VendorUpdate(email=email)
    assert exc.value.errors()[0]["loc"] == ("email",)


def test_email_is_lowercased():
    assert VendorUpdate(email="Owner.One@Example.COM").email == "owner.one@example.com"


def test_email_optional_on_update():
    assert VendorUpdate(tagline="New tagline").email is None
