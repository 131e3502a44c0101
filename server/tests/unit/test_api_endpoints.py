"""Integration tests for API endpoints."""

from datetime import date

import pytest

from factories import add_booking, add_room, auth_headers, make_token
from hotel_booking.models import BookingStatus, OperationalStatus


def stay_body(room, stay, **extra) -> dict:
    check_in, check_out = stay
    return {"room_id": str(room.id), "check_in": check_in, "check_out": check_out, **extra}


@pytest.mark.asyncio
async def test_hold_then_confirm(test_client, room, customer, future_stay):
    """A customer holds a room and confirms within the hold window."""
    response = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers=auth_headers(customer)
    )

    assert response.status_code == 200
    data = response.json()
    booking = data["booking"]
    assert data["booking_id"] == booking["id"]
    assert booking["status"] == "held"
    assert booking["hold_expires_at"] is not None
    assert booking["total_price"] == 20000
    assert booking["package_type"] == "room_only"

    response = await test_client.post(
        "/v1/booking/confirm", json={"booking_id": data["booking_id"]}, headers=auth_headers(customer)
    )

    assert response.status_code == 200
    confirmed = response.json()
    assert confirmed["status"] == "confirmed"
    assert confirmed["hold_expires_at"] is None
    assert confirmed["payment_status"] == "pending"


@pytest.mark.asyncio
async def test_hold_without_token_is_unauthorized(test_client, room, future_stay):
    response = await test_client.post("/v1/booking/hold", json=stay_body(room, future_stay))

    assert response.status_code == 401
    data = response.json()
    assert data["code"] == "UNAUTHORIZED"
    assert data["status"] == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_unauthorized(test_client, room, future_stay):
    response = await test_client.post(
        "/v1/booking/hold",
        json=stay_body(room, future_stay),
        headers={"Authorization": f"Bearer {make_token('nobody')}"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "User not found. Please sign in."


@pytest.mark.asyncio
async def test_token_with_wrong_signature_is_unauthorized(test_client, room, future_stay):
    import jwt

    forged = jwt.encode({"sub": "guest-1"}, "not-the-secret", algorithm="HS256")
    response = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers={"Authorization": f"Bearer {forged}"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_overlapping_hold_returns_conflict_problem(test_client, room, customer, other_customer, future_stay):
    first = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers=auth_headers(customer)
    )
    assert first.status_code == 200

    response = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers=auth_headers(other_customer)
    )

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "CONFLICT"
    assert data["detail"] == "Room is not available for the selected dates. Please choose different dates."


@pytest.mark.asyncio
async def test_hold_on_maintenance_room_is_unavailable(test_client, test_session, hotel, customer, future_stay):
    closed = await add_room(test_session, hotel, "202", operational_status=OperationalStatus.MAINTENANCE)

    response = await test_client.post(
        "/v1/booking/hold", json=stay_body(closed, future_stay), headers=auth_headers(customer)
    )

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "UNAVAILABLE"
    assert data["detail"] == "Room is currently maintenance and cannot be booked."


@pytest.mark.asyncio
async def test_hold_with_bad_dates_is_invalid_input(test_client, room, customer):
    response = await test_client.post(
        "/v1/booking/hold",
        json=stay_body(room, ("2030-01-05", "2030-01-05")),
        headers=auth_headers(customer),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_admin_cannot_hold(test_client, room, admin, future_stay):
    response = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers=auth_headers(admin)
    )

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_cancel_with_reason(test_client, room, customer, future_stay):
    hold = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers=auth_headers(customer)
    )
    booking_id = hold.json()["booking_id"]

    response = await test_client.post(
        "/v1/booking/cancel",
        json={"booking_id": booking_id, "reason": "plans changed"},
        headers=auth_headers(customer),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    # The room is free again
    response = await test_client.post("/v1/room/check-availability", json=stay_body(room, future_stay))
    assert response.json() == {"available": True, "reason": None}


@pytest.mark.asyncio
async def test_staff_status_update_and_cash_payment(test_client, test_session, room, customer, cashier):
    booking = await add_booking(test_session, room, customer, date(2030, 1, 5), date(2030, 1, 7))
    booking_id = str(booking.id)

    response = await test_client.post(
        "/v1/booking/update-status",
        json={"booking_id": booking_id, "status": "checked_in"},
        headers=auth_headers(cashier),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "checked_in"

    response = await test_client.post(
        "/v1/booking/update-status",
        json={"booking_id": booking_id, "status": "held"},
        headers=auth_headers(cashier),
    )
    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATE"

    response = await test_client.post(
        "/v1/booking/accept-cash-payment", json={"booking_id": booking_id}, headers=auth_headers(cashier)
    )
    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"


@pytest.mark.asyncio
async def test_walk_in_by_cashier(test_client, room, cashier, future_stay):
    response = await test_client.post(
        "/v1/booking/walk-in",
        json=stay_body(room, future_stay, guest_name="Ana Ribeiro"),
        headers=auth_headers(cashier),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "confirmed"
    assert data["user_id"] is None
    assert data["guest_name"] == "Ana Ribeiro"
    assert data["payment_status"] == "pending"


@pytest.mark.asyncio
async def test_walk_in_requires_guest_name(test_client, room, cashier, future_stay):
    response = await test_client.post(
        "/v1/booking/walk-in", json=stay_body(room, future_stay), headers=auth_headers(cashier)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_booking_of_another_customer_is_forbidden(test_client, test_session, room, customer, other_customer):
    booking = await add_booking(test_session, room, customer, date(2030, 1, 5), date(2030, 1, 7))

    response = await test_client.post(
        "/v1/booking/get", json={"booking_id": str(booking.id)}, headers=auth_headers(other_customer)
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "You can only view your own bookings."


@pytest.mark.asyncio
async def test_list_endpoints(test_client, test_session, room, customer, cashier, admin):
    mine = await add_booking(test_session, room, customer, date(2030, 1, 5), date(2030, 1, 7))
    await add_booking(
        test_session, room, customer, date(2030, 2, 5), date(2030, 2, 7), status=BookingStatus.CANCELLED
    )

    response = await test_client.post("/v1/booking/list-by-user", json={}, headers=auth_headers(customer))
    assert response.status_code == 200
    assert len(response.json()["items"]) == 2

    response = await test_client.post(
        "/v1/booking/list-by-user", json={"status": "confirmed"}, headers=auth_headers(customer)
    )
    assert [item["id"] for item in response.json()["items"]] == [str(mine.id)]

    response = await test_client.post(
        "/v1/booking/list-by-hotel", json={"hotel_id": str(room.hotel_id)}, headers=auth_headers(cashier)
    )
    assert response.status_code == 200
    assert len(response.json()["items"]) == 2

    response = await test_client.post("/v1/booking/list-by-hotel", json={}, headers=auth_headers(cashier))
    assert response.status_code == 403

    response = await test_client.post("/v1/booking/list-by-hotel", json={}, headers=auth_headers(admin))
    assert len(response.json()["items"]) == 2

    response = await test_client.post(
        "/v1/booking/list-by-room", json={"room_id": str(room.id)}, headers=auth_headers(customer)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_check_availability_for_booked_dates(test_client, test_session, room, customer):
    await add_booking(test_session, room, customer, date(2030, 1, 5), date(2030, 1, 7))

    response = await test_client.post(
        "/v1/room/check-availability", json=stay_body(room, ("2030-01-06", "2030-01-08"))
    )
    assert response.status_code == 200
    assert response.json() == {"available": False, "reason": "Room is already booked for these dates"}

    # Check-out day is free for the next guest
    response = await test_client.post(
        "/v1/room/check-availability", json=stay_body(room, ("2030-01-07", "2030-01-08"))
    )
    assert response.json()["available"] is True


@pytest.mark.asyncio
async def test_check_availability_rejects_malformed_dates(test_client, room):
    response = await test_client.post(
        "/v1/room/check-availability", json=stay_body(room, ("05/01/2030", "2030-01-08"))
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid date format. Use YYYY-MM-DD."


@pytest.mark.asyncio
async def test_available_rooms_search(test_client, test_session, hotel, room, customer):
    suite = await add_room(test_session, hotel, "301", max_occupancy=4)
    await add_booking(test_session, room, customer, date(2030, 1, 5), date(2030, 1, 7))

    response = await test_client.post(
        "/v1/room/available",
        json={"hotel_id": str(hotel.id), "check_in": "2030-01-05", "check_out": "2030-01-06"},
    )

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [str(suite.id)]

    response = await test_client.post(
        "/v1/room/available",
        json={"hotel_id": str(hotel.id), "check_in": "2030-02-01", "check_out": "2030-02-02", "min_occupancy": 3},
    )
    assert [item["room_number"] for item in response.json()["items"]] == ["301"]


@pytest.mark.asyncio
async def test_delete_room_endpoint(test_client, room, cashier, customer):
    response = await test_client.post(
        "/v1/room/delete", json={"room_id": str(room.id)}, headers=auth_headers(customer)
    )
    assert response.status_code == 403

    response = await test_client.post(
        "/v1/room/delete", json={"room_id": str(room.id)}, headers=auth_headers(cashier)
    )
    assert response.status_code == 200
    assert response.json()["is_deleted"] is True


@pytest.mark.asyncio
async def test_restore_room_endpoint(test_client, room, cashier, outside_staff):
    await test_client.post("/v1/room/delete", json={"room_id": str(room.id)}, headers=auth_headers(cashier))

    response = await test_client.post(
        "/v1/room/restore", json={"room_id": str(room.id)}, headers=auth_headers(outside_staff)
    )
    assert response.status_code == 403

    for _ in range(2):
        response = await test_client.post(
            "/v1/room/restore", json={"room_id": str(room.id)}, headers=auth_headers(cashier)
        )
        assert response.status_code == 200
        assert response.json()["is_deleted"] is False


@pytest.mark.asyncio
async def test_audit_endpoints_are_admin_only(test_client, room, customer, admin, future_stay):
    hold = await test_client.post(
        "/v1/booking/hold", json=stay_body(room, future_stay), headers=auth_headers(customer)
    )
    booking_id = hold.json()["booking_id"]

    response = await test_client.post(
        "/v1/audit/by-target",
        json={"target_type": "booking", "target_id": booking_id},
        headers=auth_headers(customer),
    )
    assert response.status_code == 403

    response = await test_client.post(
        "/v1/audit/by-target",
        json={"target_type": "booking", "target_id": booking_id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    events = response.json()["items"]
    assert [event["action"] for event in events] == ["booking_created"]
    assert events[0]["actor_id"] == str(customer.id)

    response = await test_client.post("/v1/audit/recent", json={"limit": 10}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert len(response.json()["items"]) == 1
