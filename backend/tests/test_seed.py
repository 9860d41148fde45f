import pytest

from villa_admin.models.inventory import VillaUnit
from villa_admin.models.villa import Villa
from villa_admin.services import auth_service
from villa_admin.services.seed_service import ensure_seed_data
from villa_admin.utils.errors import AuthenticationError


def test_seed_is_idempotent(db):
    first = ensure_seed_data(db)
    second = ensure_seed_data(db)

    assert first == {"villas": 3, "packages": 2, "safari_options": 3, "units": 22}
    assert second == {"villas": 0, "packages": 0, "safari_options": 0, "units": 0}


def test_seed_never_overwrites_existing_rows(db):
    ensure_seed_data(db, with_units=False)
    villa = db.query(Villa).filter(Villa.id == "glass-cottage").one()
    villa.base_price = 99999
    db.commit()

    ensure_seed_data(db, with_units=False)

    assert db.query(Villa).filter(Villa.id == "glass-cottage").one().base_price == 99999
    assert db.query(VillaUnit).count() == 0


def test_database_admin_login(db):
    auth_service.create_admin_user(db, "Manager@Resort.com", "s3cret", name="Manager")

    user = auth_service.authenticate(db, "manager@resort.com", "s3cret")

    assert user["email"] == "manager@resort.com"
    assert auth_service.get_admin(db, user["id"])["name"] == "Manager"

    with pytest.raises(AuthenticationError):
        auth_service.authenticate(db, "manager@resort.com", "wrong")
