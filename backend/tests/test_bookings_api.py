"""
Tests for booking endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_book_seats(client: AsyncClient, auth_headers, test_schedule):
    """Successful booking decrements available seats."""
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 2},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["owner"] == "alice"
    assert data["schedule_id"] == test_schedule.id
    assert data["seat_class"] == "AC"
    assert data["seat_count"] == 2
    assert data["ticket_id"].startswith("TKT")
    assert float(data["total_fare"]) == 3000.0

    availability = await client.get(f"/api/v1/schedules/{test_schedule.id}/availability")
    assert availability.json() == {"schedule_id": test_schedule.id, "ac_available": 3, "sleeper_available": 10}


@pytest.mark.asyncio
async def test_book_seats_unauthenticated(client: AsyncClient, test_schedule):
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 1},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_with_bad_token(client: AsyncClient, test_schedule):
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 1},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_too_many_seats(client: AsyncClient, auth_headers, test_schedule):
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 6},
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "insufficient_seats"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"seat_class": "AC", "seat_count": 0},
        {"seat_class": "First", "seat_count": 1},
        {"seat_class": "AC"},
    ],
)
async def test_book_invalid_payload(client: AsyncClient, auth_headers, test_schedule, payload):
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, **payload},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_book_nonexistent_schedule(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": 99999, "seat_class": "Sleeper", "seat_count": 1},
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["code"] == "schedule_not_found"


@pytest.mark.asyncio
async def test_book_departed_schedule(client: AsyncClient, auth_headers, past_schedule):
    response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": past_schedule.id, "seat_class": "AC", "seat_count": 1},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "schedule_in_past"


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, auth_headers, test_schedule):
    """Cancellation restores seats to the schedule."""
    book_response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "Sleeper", "seat_count": 3},
        headers=auth_headers,
    )
    ticket_id = book_response.json()["ticket_id"]

    cancel_response = await client.delete(f"/api/v1/bookings/{ticket_id}", headers=auth_headers)
    assert cancel_response.status_code == 200
    assert cancel_response.json() == {
        "message": "Booking cancelled successfully",
        "ticket_id": ticket_id,
        "schedule_id": test_schedule.id,
        "seat_class": "Sleeper",
        "seats_restored": 3,
    }

    availability = await client.get(f"/api/v1/schedules/{test_schedule.id}/availability")
    assert availability.json()["sleeper_available"] == 10


@pytest.mark.asyncio
async def test_cancel_twice(client: AsyncClient, auth_headers, test_schedule):
    book_response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 1},
        headers=auth_headers,
    )
    ticket_id = book_response.json()["ticket_id"]

    await client.delete(f"/api/v1/bookings/{ticket_id}", headers=auth_headers)
    response = await client.delete(f"/api/v1/bookings/{ticket_id}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found_or_not_owned"


@pytest.mark.asyncio
async def test_cancel_someone_elses_ticket(client: AsyncClient, auth_headers, other_auth_headers, test_schedule):
    book_response = await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 1},
        headers=auth_headers,
    )
    ticket_id = book_response.json()["ticket_id"]

    response = await client.delete(f"/api/v1/bookings/{ticket_id}", headers=other_auth_headers)
    assert response.status_code == 404

    availability = await client.get(f"/api/v1/schedules/{test_schedule.id}/availability")
    assert availability.json()["ac_available"] == 4


@pytest.mark.asyncio
async def test_cancel_malformed_ticket(client: AsyncClient, auth_headers):
    response = await client.delete("/api/v1/bookings/not-a-ticket", headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["code"] == "invalid_input"


@pytest.mark.asyncio
async def test_list_user_bookings(client: AsyncClient, auth_headers, other_auth_headers, test_schedule):
    """Customers only see their own bookings, oldest first."""
    for seat_class in ("AC", "Sleeper"):
        await client.post(
            "/api/v1/bookings/",
            json={"schedule_id": test_schedule.id, "seat_class": seat_class, "seat_count": 1},
            headers=auth_headers,
        )
    await client.post(
        "/api/v1/bookings/",
        json={"schedule_id": test_schedule.id, "seat_class": "AC", "seat_count": 1},
        headers=other_auth_headers,
    )

    response = await client.get("/api/v1/bookings/", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert [b["seat_class"] for b in data] == ["AC", "Sleeper"]
    assert all(b["owner"] == "alice" for b in data)
