import pytest
from datetime import datetime
from fastapi import HTTPException
from civicops.schemas.user import UserUpdate, UserTypeEnum
from civicops.services.users import UserService

def test_get_all_users_newest_first(db_session, make_user):
    make_user(full_name="Old Timer", created_at=datetime(2023, 1, 1))
    make_user(full_name="New Hire", created_at=datetime(2024, 6, 1))

    assert [u.full_name for u in UserService(db_session).get_all_users()] == ["New Hire", "Old Timer"]

def test_get_users_by_type_sorted_by_name(db_session, make_user):
    make_user(full_name="Zed Worker")
    make_user(full_name="Amy Worker")
    make_user(full_name="Rita Resident", user_type="RESIDENT")

    employees = UserService(db_session).get_users_by_type(UserTypeEnum.EMPLOYEE)

    assert [u.full_name for u in employees] == ["Amy Worker", "Zed Worker"]

def test_soft_delete_and_activate(db_session, make_user):
    user = make_user(full_name="Dana Fixer")
    service = UserService(db_session)

    deleted = service.delete_user(user.id)
    assert deleted.is_active is False
    assert service.get_user_by_id(user.id) is not None

    activated = service.activate_user(user.id)
    assert activated.is_active is True

def test_update_user(db_session, make_user):
    user = make_user(full_name="Dana Fixer")

    updated = UserService(db_session).update_user(user.id, UserUpdate(department="Electrical", max_workload=8, user_type="ADMIN"))

    assert updated.department == "Electrical"
    assert updated.max_workload == 8
    assert updated.user_type == "ADMIN"
    assert updated.full_name == "Dana Fixer"

def test_update_missing_user(db_session):
    with pytest.raises(HTTPException) as exc:
        UserService(db_session).update_user("missing", UserUpdate(department="Electrical"))
    assert exc.value.status_code == 404

def test_user_stats(db_session, make_user):
    make_user(full_name="Dana Fixer")
    make_user(full_name="Ivan Inactive", is_active=False)
    make_user(full_name="Alice Admin", user_type="ADMIN")
    make_user(full_name="Rita Resident", user_type="RESIDENT")

    stats = UserService(db_session).get_user_stats()

    assert stats.total == 4
    assert stats.by_type == {"ADMIN": 1, "EMPLOYEE": 2, "RESIDENT": 1}
    assert stats.active == 3
    assert stats.inactive == 1

def test_search_users(db_session, make_user):
    make_user(full_name="Dana Fixer", department="Road Maintenance", phone_number="555-0100")
    make_user(full_name="Sam Welder", department="Water Services")

    service = UserService(db_session)

    assert [u.full_name for u in service.search_users("ROAD")] == ["Dana Fixer"]
    assert [u.full_name for u in service.search_users("sam@")] == ["Sam Welder"]
    assert [u.full_name for u in service.search_users("555-01")] == ["Dana Fixer"]
    assert service.search_users("nobody") == []
