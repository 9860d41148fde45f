from datetime import date, timedelta

from villa_admin.core.config import settings


# =================================================
# AUTH
# =================================================
def test_admin_routes_need_login(client):
    response = client.get("/villas/")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_wrong_password_is_rejected(client):
    response = client.post("/auth/login", data={"email": settings.ADMIN_EMAIL, "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_FAILED"


def test_login_sets_session_cookie(admin_client):
    assert "access_token" in admin_client.cookies

    me = admin_client.get("/auth/me").json()
    assert me["email"] == settings.ADMIN_EMAIL
    assert me["role"] == "admin"


def test_logout_clears_session(admin_client):
    admin_client.post("/auth/logout")

    assert admin_client.get("/villas/").status_code == 401


def test_tampered_token_is_rejected(client):
    client.cookies.set("access_token", "not-a-jwt")

    assert client.get("/auth/me").status_code == 401


# =================================================
# VILLAS / PACKAGES
# =================================================
def test_villa_crud(admin_client, seeded_db):
    created = admin_client.post("/villas/", json={
        "name": "Peacock Suite",
        "base_price": 12000,
        "max_guests": 2,
    })
    assert created.status_code == 201
    assert created.json()["villa"]["id"] == "peacock-suite"

    duplicate = admin_client.post("/villas/", json={"name": "Peacock Suite", "base_price": 12000})
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "DUPLICATE_ENTRY"

    updated = admin_client.put("/villas/peacock-suite", json={"base_price": 13000})
    assert updated.json()["villa"]["base_price"] == 13000

    toggled = admin_client.post("/villas/peacock-suite/toggle-status")
    assert toggled.json()["villa"]["status"] == "inactive"

    assert admin_client.delete("/villas/peacock-suite").json() == {"success": True}
    assert admin_client.get("/villas/peacock-suite").status_code == 404


def test_villa_list_sorted_by_name(admin_client, seeded_db):
    names = [v["name"] for v in admin_client.get("/villas/").json()]

    assert names == sorted(names)
    assert len(names) == 3


def test_package_delete_blocked_by_booking(admin_client, seeded_db, guest, stay):
    check_in, check_out = stay
    admin_client.post("/bookings/", json={
        **guest,
        "villa_id": "glass-cottage",
        "package_id": "breakfast-package",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
    })

    response = admin_client.delete("/packages/breakfast-package")

    assert response.status_code == 409
    assert response.json()["code"] == "DELETE_BLOCKED"
    assert admin_client.get("/packages/breakfast-package").status_code == 200


# =================================================
# BOOKINGS
# =================================================
def test_admin_booking_lifecycle(admin_client, seeded_db, guest, stay):
    check_in, check_out = stay
    created = admin_client.post("/bookings/", json={
        **guest,
        "villa_id": "hornbill-villa",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 3,
        "advance_amount": 10000,
    })
    assert created.status_code == 201
    body = created.json()
    ref = body["booking"]["booking_id"]
    assert body["booking"]["payment_status"] == "advance_paid"
    assert body["unit"]["unit_number"].startswith("HV-")

    refused = admin_client.patch(f"/bookings/{ref}/status", json={"status": "completed"})
    assert refused.status_code == 409
    assert refused.json()["code"] == "INVALID_TRANSITION"

    confirmed = admin_client.patch(f"/bookings/{ref}/status", json={"status": "confirmed"})
    assert confirmed.json()["booking"]["status"] == "confirmed"

    listing = admin_client.get("/bookings/", params={"status": "confirmed"}).json()
    assert listing["total"] == 1
    assert listing["items"][0]["booking_id"] == ref

    activities = admin_client.get(f"/bookings/{ref}/activities").json()
    assert [a["activity_type"] for a in activities] == ["created", "status_changed"]

    stats = admin_client.get("/bookings/stats").json()
    assert stats["confirmed_bookings"] == 1


def test_booking_export_is_csv(admin_client, seeded_db, guest, stay):
    check_in, check_out = stay
    admin_client.post("/bookings/", json={
        **guest,
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
    })

    response = admin_client.get("/bookings/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    assert len(response.text.strip().splitlines()) == 2


def test_invalid_phone_rejected_by_schema(admin_client, seeded_db, guest, stay):
    check_in, check_out = stay
    response = admin_client.post("/bookings/", json={
        **guest,
        "phone": "12345",
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
    })

    assert response.status_code == 422


# =================================================
# PUBLIC
# =================================================
def test_public_booking_flow(client, seeded_db, guest, stay):
    check_in, check_out = stay

    villas = client.get("/public/villas").json()
    assert [v["id"] for v in villas][0] == "glass-cottage"

    quote = client.post("/public/quote", json={
        "villa_id": "glass-cottage",
        "package_id": "breakfast-package",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
    }).json()
    assert quote["subtotal"] == 31000
    assert quote["total"] == 36580

    available = client.get("/public/availability", params={
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
    }).json()
    cottage = next(row for row in available if row["villa"]["id"] == "glass-cottage")
    assert cottage["available_units"] == 14

    hold = client.post("/public/booking-holds", json={
        "session_id": "sess-42",
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
    })
    assert hold.status_code == 201

    booked = client.post("/public/bookings", json={
        **guest,
        "villa_id": "glass-cottage",
        "package_id": "breakfast-package",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
        "session_id": "sess-42",
    })
    assert booked.status_code == 201
    assert booked.json()["booking"]["booking_source"] == "website"
    assert booked.json()["booking"]["total_amount"] == 36580


def test_public_booking_ignores_guest_payment_id(client, seeded_db, guest, stay):
    check_in, check_out = stay
    booked = client.post("/public/bookings", json={
        **guest,
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
        "payment_id": "pay_forged",
    })

    assert booked.status_code == 201
    assert booked.json()["booking"]["payment_id"] is None
    assert booked.json()["booking"]["payment_status"] == "pending"


def test_public_booking_in_the_past_is_rejected(client, seeded_db, guest):
    check_in = date.today() - timedelta(days=2)
    response = client.post("/public/bookings", json={
        **guest,
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": (check_in + timedelta(days=1)).isoformat(),
        "guests": 2,
    })

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_public_safari_query(client, seeded_db, guest):
    response = client.post("/public/safari-queries", json={
        **guest,
        "safari_option_id": "evening-wildlife-safari",
        "preferred_date": (date.today() + timedelta(days=3)).isoformat(),
        "number_of_persons": 2,
    })

    assert response.status_code == 201
    assert isinstance(response.json()["id"], int)


# =================================================
# DASHBOARD / DEMO MODE
# =================================================
def test_dashboard_stats_are_cached_until_a_write(admin_client, seeded_db, guest, stay):
    first = admin_client.get("/admin/dashboard/stats").json()
    assert first["total_bookings"] == 0
    assert first["total_villas"] == 3

    check_in, check_out = stay
    admin_client.post("/bookings/", json={
        **guest,
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
    })

    assert admin_client.get("/admin/dashboard/stats").json()["total_bookings"] == 1


def test_integration_status(admin_client):
    status = admin_client.get("/admin/dashboard/integrations").json()

    assert set(status) == {"database", "payment", "email"}


def test_demo_mode_serves_catalogue(demo_client):
    villas = demo_client.get("/public/villas").json()

    assert [v["id"] for v in villas] == ["glass-cottage", "hornbill-villa", "kingfisher-villa"]
    assert demo_client.get("/public/packages").status_code == 200


def test_demo_mode_refuses_writes(demo_client, guest, stay):
    check_in, check_out = stay
    response = demo_client.post("/public/bookings", json={
        **guest,
        "villa_id": "glass-cottage",
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
    })

    assert response.status_code == 503
    assert response.json()["code"] == "NOT_CONFIGURED"


def test_demo_admin_can_log_in_without_database(demo_client):
    response = demo_client.post(
        "/auth/login",
        data={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD},
    )

    assert response.status_code == 200
    units = demo_client.get("/inventory/villas/hornbill-villa/units").json()
    assert len(units) == 4
