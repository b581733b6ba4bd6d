from civicops.services.employees import EmployeeDirectory

def test_active_employees_sorted_by_name(db_session, make_user):
    make_user(full_name="Zoe Paver", department="Road Maintenance")
    make_user(full_name="Adam Plumber", department="Water Services")
    make_user(full_name="Inactive Ivan", is_active=False)
    make_user(full_name="Admin Alice", user_type="ADMIN")
    make_user(full_name="Resident Rita", user_type="RESIDENT")

    employees = EmployeeDirectory(db_session).get_active_employees()

    assert [e.full_name for e in employees] == ["Adam Plumber", "Zoe Paver"]

def test_department_narrowing_is_exact(db_session, make_user):
    make_user(full_name="Adam Plumber", department="Water Services")
    make_user(full_name="Wendy Water", department="Water")

    directory = EmployeeDirectory(db_session)

    assert [e.full_name for e in directory.get_employees_by_department("Water Services")] == ["Adam Plumber"]
    assert directory.get_active_employees(department="Parks & Recreation") == []

def test_employee_lookup_ignores_inactive_and_non_employees(db_session, make_user):
    active = make_user(full_name="Adam Plumber")
    inactive = make_user(full_name="Inactive Ivan", is_active=False)
    admin = make_user(full_name="Admin Alice", user_type="ADMIN")

    directory = EmployeeDirectory(db_session)

    assert directory.get_employee_by_id(active.id).full_name == "Adam Plumber"
    assert directory.get_employee_by_id(inactive.id) is None
    assert directory.get_employee_by_id(admin.id) is None
    assert directory.get_employee_by_id("missing") is None

def test_missing_max_workload_uses_default(db_session, make_user):
    employee = make_user(full_name="Adam Plumber", max_workload=None, current_workload=None)

    found = EmployeeDirectory(db_session).get_employee_by_id(employee.id)

    assert found.max_workload == 5
    assert found.current_workload == 0
