import pytest

from hostelmart import crud
from hostelmart.database import Base
from hostelmart.exceptions import ConflictError, StoreError

from conftest import product_body


def _create(client, **overrides) -> dict:
    res = client.post("/api/products", json=product_body(**overrides))
    assert res.status_code == 200, res.text
    return res.json()


# ============================================
# Listings
# ============================================

def test_create_product_embeds_seller_contact(client, seller):
    product = _create(client)

    assert product["sellerId"] == seller["id"]
    assert product["price"] == 350
    assert product["roomNumber"] == "B-214"
    assert product["seller"]["whatsappNumber"] == "919876543210"
    assert product["seller"]["whatsappLink"] == "https://wa.me/919876543210"
    assert "email" not in product["seller"]


def test_create_product_accepts_string_price(client, seller):
    product = _create(client, price="120.50")

    assert product["price"] == 120.5


def test_create_product_missing_fields(client, seller):
    body = product_body()
    del body["description"]

    res = client.post("/api/products", json=body)

    assert res.status_code == 400


def test_create_product_rejects_unknown_category(client, seller):
    res = client.post("/api/products", json=product_body(category="weapons"))

    assert res.status_code == 400


def test_create_product_rejects_zero_price(client, seller):
    res = client.post("/api/products", json=product_body(price=0))

    assert res.status_code == 400


def test_list_filters(client, seller):
    _create(client, name="Table lamp", description="Warm white LED", category="electronics", price=400)
    _create(client, name="Cycle", description="Hero Sprint, 21 gears", category="transportation",
            hostel="Godavari", price=2500)
    _create(client, name="Calculus notes", description="Handwritten, first year", category="books", price=50)

    everything = client.get("/api/products", params={"hostel": "All Hostels", "category": "all"})
    assert len(everything.json()) == 3

    by_hostel = client.get("/api/products", params={"hostel": "Godavari"}).json()
    assert [p["name"] for p in by_hostel] == ["Cycle"]

    by_category = client.get("/api/products", params={"category": "books"}).json()
    assert [p["name"] for p in by_category] == ["Calculus notes"]

    by_search = client.get("/api/products", params={"search": "LED"}).json()
    assert [p["name"] for p in by_search] == ["Table lamp"]

    case_insensitive = client.get("/api/products", params={"search": "cycle"}).json()
    assert [p["name"] for p in case_insensitive] == ["Cycle"]


def test_search_wildcards_match_literally(client, seller):
    _create(client, name="Lamp", description="Warm LED")
    _create(client, name="Desk", description="50% off")

    underscore = client.get("/api/products", params={"search": "_"}).json()
    percent = client.get("/api/products", params={"search": "%"}).json()

    assert underscore == []
    assert [p["name"] for p in percent] == ["Desk"]


def test_list_sort_by_price(client, seller):
    _create(client, name="Mid", price=200)
    _create(client, name="Cheap", price=20)
    _create(client, name="Dear", price=2000)

    low = client.get("/api/products", params={"sortBy": "price-low"}).json()
    high = client.get("/api/products", params={"sortBy": "price-high"}).json()

    assert [p["name"] for p in low] == ["Cheap", "Mid", "Dear"]
    assert [p["name"] for p in high] == ["Dear", "Mid", "Cheap"]


def test_get_product(client, seller):
    product = _create(client)

    res = client.get(f"/api/products/{product['id']}")

    assert res.status_code == 200
    assert res.json()["name"] == "Engineering Mathematics"


def test_get_missing_product(client, seller):
    res = client.get("/api/products/does-not-exist")

    assert res.status_code == 404
    assert res.json()["error"] == "Product not found"


def test_owner_updates_product(client, seller):
    product = _create(client)

    res = client.put(f"/api/products/{product['id']}", json={"price": 300, "roomNumber": "C-101"})

    assert res.status_code == 200, res.text
    assert res.json()["price"] == 300
    assert res.json()["roomNumber"] == "C-101"
    assert res.json()["name"] == "Engineering Mathematics"


def test_other_account_cannot_update_or_delete(client, seller, register, make_client):
    product = _create(client)
    other = make_client()
    register(on=other, email="ravi@campus.edu", name="Ravi")

    update = other.put(f"/api/products/{product['id']}", json={"price": 1})
    delete = other.delete(f"/api/products/{product['id']}")

    assert update.status_code == 403
    assert delete.status_code == 403
    assert client.get(f"/api/products/{product['id']}").json()["price"] == 350


def test_update_missing_product(client, seller):
    res = client.put("/api/products/does-not-exist", json={"price": 10})

    assert res.status_code == 404


def test_owner_deletes_product(client, seller):
    product = _create(client)

    res = client.delete(f"/api/products/{product['id']}")

    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert client.get(f"/api/products/{product['id']}").status_code == 404


# ============================================
# Current account
# ============================================

def test_my_products_only_lists_own(client, seller, register, make_client):
    _create(client, name="Mine")
    other = make_client()
    register(on=other, email="ravi@campus.edu", name="Ravi")
    _create(other, name="Theirs")

    mine = client.get("/api/user/products").json()

    assert [p["name"] for p in mine] == ["Mine"]


def test_get_profile(client, seller):
    res = client.get("/api/user/profile")

    assert res.status_code == 200
    assert res.json()["email"] == "asha@campus.edu"
    assert "passwordHash" not in res.json()


def test_update_profile_changes_contact_fields_only(client, seller):
    res = client.put(
        "/api/user/profile",
        json={"hostel": "Godavari", "whatsappNumber": "919000000000", "name": "Renamed"},
    )

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["hostel"] == "Godavari"
    assert body["whatsappNumber"] == "919000000000"
    assert body["roomNumber"] == "B-214"
    assert body["name"] == "Asha Verma"


def test_profile_requires_session(client):
    res = client.get("/api/user/profile", follow_redirects=False)

    assert res.status_code == 307


# ============================================
# Hostels
# ============================================

def test_hostels_listed_alphabetically(client, seller):
    for name in ["Narmada", "Kaveri", "Godavari"]:
        assert client.post("/api/hostels", json={"name": name}).status_code == 200

    res = client.get("/api/hostels")

    assert [h["name"] for h in res.json()] == ["Godavari", "Kaveri", "Narmada"]


def test_hostel_list_is_public(client):
    assert client.get("/api/hostels").json() == []


def test_duplicate_hostel_conflicts(client, seller):
    client.post("/api/hostels", json={"name": "Kaveri"})

    res = client.post("/api/hostels", json={"name": "Kaveri"})

    assert res.status_code == 409
    assert res.json()["error"] == "Hostel already exists"


def test_create_hostel_requires_session(client):
    res = client.post("/api/hostels", json={"name": "Kaveri"})

    assert res.status_code == 401


def test_create_hostel_missing_name(client, seller):
    res = client.post("/api/hostels", json={})

    assert res.status_code == 400


def test_store_unique_constraint_raises_conflict(app, client):
    # Bypasses the look-before-insert check in the router
    with app.state.session_factory() as db:
        crud.create_hostel(db, "Kaveri")
        with pytest.raises(ConflictError):
            crud.create_hostel(db, "Kaveri")


def test_store_duplicate_email_raises_conflict(app, client):
    fields = dict(name="A", email="dup@campus.edu", password_hash="x", hostel="Kaveri",
                  room_number="1", whatsapp_number="91")
    with app.state.session_factory() as db:
        crud.create_user(db, **fields)
        with pytest.raises(ConflictError):
            crud.create_user(db, **fields)


def test_store_failure_is_500(client, monkeypatch):
    def _fail(db):
        raise StoreError()

    monkeypatch.setattr(crud, "list_hostels", _fail)

    res = client.get("/api/hostels")

    assert res.status_code == 500
    assert res.json() == {"error": "Something went wrong", "code": "STORE_ERROR"}


def test_store_query_error_becomes_store_error(app, client):
    Base.metadata.drop_all(app.state.engine)

    with app.state.session_factory() as db:
        with pytest.raises(StoreError):
            crud.list_hostels(db)
