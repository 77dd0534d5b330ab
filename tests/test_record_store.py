import pytest
from appraze.core.exceptions import RecordStoreError
from appraze.services.record_store import RecordStore


@pytest.fixture
def store(db_session):
    return RecordStore(db_session)


def _employee(store, org, name, **extra):
    return store.insert("employees", [{"organization_id": org.id, "name": name, **extra}])[0]


def test_insert_returns_rows_with_server_ids(store, org):
    rows = store.insert("employees", [
        {"organization_id": org.id, "name": "Sam"},
        {"organization_id": org.id, "name": "Alex"},
    ])
    assert len(rows) == 2
    assert all(row["id"] for row in rows)
    assert rows[0]["status"] == "Active"


def test_select_filters_orders_and_limits(store, org):
    _employee(store, org, "Charlie", department="Sales")
    _employee(store, org, "Alice", department="Sales")
    _employee(store, org, "Bob", department="Ops")

    names = [r["name"] for r in store.select("employees", {"department": "Sales"}, order_by="name")]
    assert names == ["Alice", "Charlie"]

    desc = store.select("employees", {"organization_id": org.id}, order_by="name", ascending=False, limit=2)
    assert [r["name"] for r in desc] == ["Charlie", "Bob"]


def test_operator_suffixes(store, org):
    _employee(store, org, "Alice", status="Active")
    _employee(store, org, "Bob", status="On Leave")
    _employee(store, org, "Cleo", status="Inactive")

    not_active = store.select("employees", {"status__ne": "Active"}, order_by="name")
    assert [r["name"] for r in not_active] == ["Bob", "Cleo"]

    some = store.select("employees", {"name__in": ["Alice", "Cleo"]}, order_by="name")
    assert [r["name"] for r in some] == ["Alice", "Cleo"]


def test_none_filter_matches_null(store, org):
    _employee(store, org, "With Dept", department="Ops")
    _employee(store, org, "No Dept")
    rows = store.select("employees", {"department": None})
    assert [r["name"] for r in rows] == ["No Dept"]


def test_single_not_found_uses_store_code(store):
    with pytest.raises(RecordStoreError) as exc:
        store.single("employees", {"id": "missing"})
    assert exc.value.code == "PGRST116"
    assert exc.value.is_not_found


def test_single_with_several_rows_is_not_found(store, org):
    _employee(store, org, "Twin")
    _employee(store, org, "Twin")
    with pytest.raises(RecordStoreError) as exc:
        store.single("employees", {"name": "Twin"})
    assert exc.value.code == RecordStoreError.NOT_FOUND


def test_maybe_single_maps_not_found_to_none(store, org):
    assert store.maybe_single("employees", {"id": "missing"}) is None
    created = _employee(store, org, "Solo")
    assert store.maybe_single("employees", {"id": created["id"]})["name"] == "Solo"


def test_unknown_table_and_column_are_bad_requests(store):
    with pytest.raises(RecordStoreError) as exc:
        store.select("payroll", {})
    assert exc.value.code == "PGRST100"

    with pytest.raises(RecordStoreError) as exc:
        store.select("employees", {"salary": 10})
    assert exc.value.code == "PGRST100"


def test_unique_violation_maps_to_23505_and_session_recovers(store, org):
    store.insert("organizations", [{"name": "Dup", "slug": "dup"}])
    with pytest.raises(RecordStoreError) as exc:
        store.insert("organizations", [{"name": "Dup again", "slug": "dup"}])
    assert exc.value.code == "23505"

    # The failed call rolled back; later calls still work
    assert store.maybe_single("organizations", {"slug": "dup"})["name"] == "Dup"


def test_update_returns_affected_rows(store, org):
    a = _employee(store, org, "Alice")
    _employee(store, org, "Bob")
    rows = store.update("employees", {"department": "R&D"}, {"id": a["id"]})
    assert len(rows) == 1
    assert rows[0]["department"] == "R&D"
    assert store.update("employees", {"department": "X"}, {"id": "missing"}) == []


def test_upsert_inserts_then_updates_on_conflict_key(store, org):
    first = store.upsert(
        "subscriptions",
        {"stripe_subscription_id": "sub_1", "status": "incomplete"},
        on_conflict=("stripe_subscription_id",),
    )
    second = store.upsert(
        "subscriptions",
        {"stripe_subscription_id": "sub_1", "status": "active"},
        on_conflict=("stripe_subscription_id",),
    )
    assert first["id"] == second["id"]
    assert second["status"] == "active"
    assert len(store.select("subscriptions")) == 1


def test_expand_embeds_related_rows(store, org):
    emp = _employee(store, org, "Jordan", position="Engineer")
    review = store.insert("reviews", [{"organization_id": org.id, "employee_id": emp["id"], "status": "draft"}])[0]

    fetched = store.single("reviews", {"id": review["id"]}, expand=("employee",))
    assert fetched["employee"]["name"] == "Jordan"
    assert fetched["employee"]["position"] == "Engineer"

    with pytest.raises(RecordStoreError) as exc:
        store.single("reviews", {"id": review["id"]}, expand=("manager",))
    assert exc.value.code == "PGRST100"


def test_delete_cascades_review_field_values(store, org):
    template = store.insert("review_templates", [{"organization_id": org.id, "name": "Annual"}])[0]
    field = store.insert("review_fields", [{"template_id": template["id"], "label": "Goals"}])[0]
    review = store.insert("reviews", [{"organization_id": org.id, "template_id": template["id"]}])[0]
    store.insert("review_field_values", [{"review_id": review["id"], "field_id": field["id"], "value": "Met"}])

    assert store.delete("reviews", {"id": review["id"]}) == 1
    assert store.select("review_field_values", {"review_id": review["id"]}) == []
    # The template side is untouched
    assert store.maybe_single("review_fields", {"id": field["id"]}) is not None
