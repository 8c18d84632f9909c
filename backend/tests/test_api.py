"""API tests over an in-memory database with a pinned clock."""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.orm import sessionmaker

from studio.dependencies import get_reference_now
from studio.errors import DiscountCodeError
from studio.main import app
from studio.models import DiscountCodes, DiscountCodeUses
from studio.services.pricing import redeem_discount_code
from studio.services.slots import slots_for_date


def create_code(client, **overrides):
    payload = {
        "code": "spring",
        "discount_percentage": 20,
        "valid_from": "2026-03-01",
        "valid_until": "2026-03-31",
        "max_uses": 10,
        "description": "Spring promo",
    }
    payload.update(overrides)
    response = client.post("/discount_codes/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    def test_health_without_redis(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "redis": None}


class TestPricingEndpoints:

    def test_day_info_holiday(self, client):
        body = client.get("/pricing/day", params={"date": "2026-03-16"}).json()
        assert body["day_type"] == "holiday"
        assert Decimal(body["base_price"]) == Decimal("2000")
        assert body["is_business_day"] is False

    def test_day_info_friday(self, client):
        body = client.get("/pricing/day", params={"date": "2026-03-13"}).json()
        assert body["day_type"] == "weekend"
        assert body["is_pricing_weekend"] is True
        assert body["is_business_day"] is True

    def test_day_info_uses_override(self, client):
        client.post("/date_overrides/", json={"date": "2026-03-13", "custom_price": 1000})
        body = client.get("/pricing/day", params={"date": "2026-03-13"}).json()
        assert Decimal(body["base_price"]) == Decimal("1000")
        assert Decimal(body["custom_price"]) == Decimal("1000")

    def test_invalid_date_format(self, client):
        assert client.get("/pricing/day", params={"date": "13/03/2026"}).status_code == 422

    def test_quote_worked_example(self, client):
        response = client.post("/pricing/quote", json={
            "date": "2026-03-10",
            "reservation_count": 3,
            "loyalty_points": 200,
        })
        assert response.status_code == 200
        body = response.json()
        assert [d["kind"] for d in body["discounts"]] == ["last_minute", "loyalty", "loyalty_points"]
        assert Decimal(body["original_price"]) == Decimal("1500")
        assert Decimal(body["final_price"]) == Decimal("947.5")
        assert Decimal(body["total_discount"]) == Decimal("552.5")
        assert body["currency"] == "MXN"

    def test_quote_override_lookup_and_explicit_null(self, client):
        client.post("/date_overrides/", json={"date": "2026-04-21", "custom_price": 900})

        looked_up = client.post("/pricing/quote", json={"date": "2026-04-21"}).json()
        assert Decimal(looked_up["base_price"]) == Decimal("900")

        tier = client.post("/pricing/quote", json={"date": "2026-04-21", "custom_price": None}).json()
        assert Decimal(tier["base_price"]) == Decimal("1500")

        given = client.post("/pricing/quote", json={"date": "2026-04-21", "custom_price": 1234}).json()
        assert Decimal(given["final_price"]) == Decimal("1234")

    def test_quote_with_code_skips_referral(self, client):
        create_code(client)
        body = client.post("/pricing/quote", json={
            "date": "2026-04-21",
            "discount_code": " Spring ",
            "is_first_reservation": True,
        }).json()
        kinds = [d["kind"] for d in body["discounts"]]
        assert kinds == ["discount_code"]
        assert body["discounts"][0]["details"] == {"code": "SPRING"}
        assert Decimal(body["final_price"]) == Decimal("1200")

    def test_quote_unknown_code(self, client):
        response = client.post("/pricing/quote", json={"date": "2026-04-21", "discount_code": "NOPE"})
        assert response.status_code == 404
        assert response.json()["reason"] == "not_found"

    def test_quote_rejects_negative_credits(self, client):
        response = client.post("/pricing/quote", json={"date": "2026-04-21", "credits": -1})
        assert response.status_code == 422

    def test_loyalty(self, client):
        body = client.get("/pricing/loyalty", params={"confirmed_count": 5, "paid_amount": 1500}).json()
        assert body["level"] == "vip"
        assert body["points_to_grant"] == 150
        assert body["points_expire_on"] == "2027-03-09"

    def test_loyalty_level_only(self, client):
        body = client.get("/pricing/loyalty", params={"confirmed_count": 0}).json()
        assert body["level"] == "initial"
        assert body["points_to_grant"] is None


class TestSlotsEndpoints:

    def test_sunday_grid(self, client):
        body = client.get("/slots/day", params={"date": "2026-03-15"}).json()
        assert len(body["slots"]) == 7
        assert body["open_slots_count"] == 7
        assert body["slots"][0]["display_end"] == "12:00"

    def test_today_hides_nothing_before_opening(self, client):
        body = client.get("/slots/day", params={"date": "2026-03-09"}).json()
        assert body["open_slots_count"] == 11

    def test_past_and_far_dates_rejected(self, client):
        assert client.get("/slots/day", params={"date": "2026-03-08"}).status_code == 400
        assert client.get("/slots/day", params={"date": "2026-09-10"}).status_code == 400

    def test_six_months_ahead_is_bookable(self, client):
        assert client.get("/slots/day", params={"date": "2026-06-07"}).status_code == 200
        assert client.get("/slots/day", params={"date": "2026-09-09"}).status_code == 200

    def test_closed_day(self, client):
        client.post("/date_overrides/", json={"date": "2026-03-10", "is_closed": True, "reason": "Maintenance"})
        body = client.get("/slots/day", params={"date": "2026-03-10"}).json()
        assert body["is_closed"] is True
        assert body["slots"] == []

    def test_occupied_slot_shows_as_taken(self, client):
        client.post("/occupied_slots/", json={"date": "2026-03-10", "start_time": "14:00", "reservation_ref": "R-1"})
        body = client.get("/slots/day", params={"date": "2026-03-10"}).json()
        taken = [s for s in body["slots"] if not s["is_available"]]
        assert [(s["start_time"], s["unavailable_reason"]) for s in taken] == [("14:00", "occupied")]
        assert body["open_slots_count"] == 10

    def test_calendar_counts(self, client):
        client.post("/date_overrides/", json={"date": "2026-03-10", "is_closed": True})
        body = client.get("/slots/calendar", params={"start_date": "2026-03-09", "end_date": "2026-03-15"}).json()
        counts = {d["date"]: d["open_slots_count"] for d in body["days"]}
        assert counts["2026-03-09"] == 11
        assert counts["2026-03-10"] == 0
        assert counts["2026-03-15"] == 7
        assert body["cached"] is False
        assert body["slot_step_minutes"] == 45

    def test_calendar_clamps_range(self, client):
        body = client.get("/slots/calendar", params={"start_date": "2026-01-01", "end_date": "2027-01-01"}).json()
        assert body["start_date"] == "2026-03-09"
        assert body["end_date"] == "2026-09-09"
        assert body["max_date"] == "2026-09-09"
        assert len(body["days"]) == 185

    def test_calendar_cache_is_invalidated(self, cached_client, store):
        now = datetime.now()
        app.dependency_overrides[get_reference_now] = lambda: now
        day = now.date() + timedelta(days=7)
        params = {"start_date": day.isoformat(), "end_date": day.isoformat()}

        first = cached_client.get("/slots/calendar", params=params).json()
        assert first["cached"] is True
        assert first["days"][0]["open_slots_count"] == len(slots_for_date(day))
        assert store.mget_counts([day], now)[day] == len(slots_for_date(day))

        cached_client.post("/occupied_slots/", json={"date": day.isoformat(), "start_time": "11:00"})
        assert store.mget_counts([day], now)[day] is None

        second = cached_client.get("/slots/calendar", params=params).json()
        assert second["days"][0]["open_slots_count"] == len(slots_for_date(day)) - 1

    def test_invalidate_without_cache(self, client):
        body = client.post("/slots/invalidate", json={}).json()
        assert body == {"deleted_keys": 0, "dates": "all"}

    def test_invalidate_empty_list_keeps_cache(self, cached_client, store):
        now = datetime.now()
        app.dependency_overrides[get_reference_now] = lambda: now
        day = now.date() + timedelta(days=7)
        store.store_multiple_days({day: slots_for_date(day)})

        body = cached_client.post("/slots/invalidate", json={"dates": []}).json()
        assert body == {"deleted_keys": 0, "dates": []}
        assert store.mget_counts([day], now)[day] is not None

    def test_invalidate_needs_both_bounds(self, client):
        assert client.post("/slots/invalidate", json={"start_date": "2026-03-10"}).status_code == 400


class TestOccupiedSlots:

    def test_create_and_delete(self, client):
        created = client.post("/occupied_slots/", json={"date": "2026-03-14", "start_time": "18:30:00"})
        assert created.status_code == 201
        body = created.json()
        assert body["start_time"] == "18:30"
        assert body["end_time"] == "19:15:00"

        assert client.delete(f"/occupied_slots/{body['id']}").status_code == 204
        assert client.get(f"/occupied_slots/{body['id']}").status_code == 404

    def test_double_booking(self, client):
        payload = {"date": "2026-03-10", "start_time": "11:45"}
        assert client.post("/occupied_slots/", json=payload).status_code == 201
        response = client.post("/occupied_slots/", json=payload)
        assert response.status_code == 409
        assert response.json()["detail"] == "Slot already occupied"

    def test_off_grid_time(self, client):
        assert client.post("/occupied_slots/", json={"date": "2026-03-15", "start_time": "18:30"}).status_code == 400

    def test_malformed_time(self, client):
        response = client.post("/occupied_slots/", json={"date": "2026-03-10", "start_time": "25:00"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidTimeError"

    def test_closed_day(self, client):
        client.post("/date_overrides/", json={"date": "2026-03-10", "is_closed": True})
        assert client.post("/occupied_slots/", json={"date": "2026-03-10", "start_time": "11:00"}).status_code == 400

    def test_list_by_date(self, client):
        client.post("/occupied_slots/", json={"date": "2026-03-10", "start_time": "12:30"})
        client.post("/occupied_slots/", json={"date": "2026-03-11", "start_time": "12:30"})
        rows = client.get("/occupied_slots/", params={"target_date": "2026-03-10"}).json()
        assert [r["date"] for r in rows] == ["2026-03-10"]


class TestDateOverrides:

    def test_crud(self, client):
        created = client.post("/date_overrides/", json={"date": "2026-03-20", "custom_price": 2200})
        assert created.status_code == 201
        override_id = created.json()["id"]
        assert created.json()["is_closed"] is False

        updated = client.patch(f"/date_overrides/{override_id}", json={"is_closed": True})
        assert updated.json()["is_closed"] is True
        assert Decimal(updated.json()["custom_price"]) == Decimal("2200")

        assert len(client.get("/date_overrides/").json()) == 1
        assert client.delete(f"/date_overrides/{override_id}").status_code == 204
        assert client.get(f"/date_overrides/{override_id}").status_code == 404

    def test_one_override_per_date(self, client):
        assert client.post("/date_overrides/", json={"date": "2026-03-20"}).status_code == 201
        assert client.post("/date_overrides/", json={"date": "2026-03-20"}).status_code == 409

    def test_missing(self, client):
        assert client.patch("/date_overrides/999", json={"is_closed": True}).status_code == 404


class TestDiscountCodes:

    def test_stored_normalized(self, client):
        body = create_code(client)
        assert body["code"] == "SPRING"
        assert body["current_uses"] == 0
        assert body["active"] is True

    def test_duplicate(self, client):
        create_code(client)
        assert client.post("/discount_codes/", json={
            "code": "SPRING", "discount_percentage": 5,
            "valid_from": "2026-03-01", "valid_until": "2026-03-31",
        }).status_code == 409

    def test_reversed_period(self, client):
        response = client.post("/discount_codes/", json={
            "code": "X1", "discount_percentage": 5,
            "valid_from": "2026-03-31", "valid_until": "2026-03-01",
        })
        assert response.status_code == 400

    def test_validate(self, client):
        create_code(client)
        body = client.post("/discount_codes/validate", json={"code": "spring"}).json()
        assert body["valid"] is True
        assert Decimal(body["discount_percentage"]) == Decimal("20")

    def test_validate_expired(self, client):
        create_code(client, code="WINTER", valid_from="2026-01-01", valid_until="2026-02-28")
        response = client.post("/discount_codes/validate", json={"code": "winter"})
        assert response.status_code == 400
        assert response.json()["reason"] == "expired"

    def test_validate_blank(self, client):
        response = client.post("/discount_codes/validate", json={"code": "  "})
        assert response.status_code == 400
        assert response.json()["reason"] == "missing"

    def test_redeem_once_per_email(self, client):
        code = create_code(client)
        redeemed = client.post(f"/discount_codes/{code['id']}/redeem", json={"email": "Ana@Example.com"})
        assert redeemed.status_code == 200
        assert redeemed.json()["current_uses"] == 1

        again = client.post(f"/discount_codes/{code['id']}/redeem", json={"email": "ana@example.com"})
        assert again.status_code == 400
        assert again.json()["reason"] == "already_used"

        quote = client.post("/pricing/quote", json={
            "date": "2026-04-21", "discount_code": "SPRING", "email": "ana@example.com",
        })
        assert quote.status_code == 400

    def test_exhausted(self, client):
        code = create_code(client, max_uses=1)
        client.post(f"/discount_codes/{code['id']}/redeem", json={"email": "a@example.com"})
        response = client.post("/discount_codes/validate", json={"code": "SPRING", "email": "b@example.com"})
        assert response.json()["reason"] == "exhausted"

    def test_redeem_rejected_when_limit_reached_meanwhile(self, client, db_session):
        code = create_code(client, max_uses=1)
        # the request loads the code before another session takes the last use
        other = sessionmaker(bind=db_session.get_bind())()
        row = other.get(DiscountCodes, code["id"])
        db_session.get(DiscountCodes, code["id"])

        redeem_discount_code(other, row, "a@example.com")
        other.commit()
        other.close()

        row = db_session.get(DiscountCodes, code["id"])
        with pytest.raises(DiscountCodeError) as exc:
            redeem_discount_code(db_session, row, "b@example.com")
        assert exc.value.reason == "exhausted"
        db_session.rollback()

        assert db_session.get(DiscountCodes, code["id"]).current_uses == 1
        assert db_session.query(DiscountCodeUses).count() == 1

    def test_redeem_conflict_returns_409(self, client, db_session, monkeypatch):
        code = create_code(client, max_uses=1)
        db_session.execute(
            update(DiscountCodes).where(DiscountCodes.id == code["id"]).values(current_uses=1)
        )
        db_session.commit()
        # validation passes on a stale read, the counter update does not
        monkeypatch.setattr("studio.routers.discount_codes.find_applicable_code", lambda *args: None)
        response = client.post(f"/discount_codes/{code['id']}/redeem", json={"email": "b@example.com"})
        assert response.status_code == 409
        assert db_session.query(DiscountCodeUses).count() == 0

    def test_patch_and_delete(self, client):
        code = create_code(client)
        assert client.post(f"/discount_codes/{code['id']}/redeem", json={"email": "a@example.com"}).status_code == 200

        patched = client.patch(f"/discount_codes/{code['id']}", json={"active": False})
        assert patched.json()["active"] is False
        assert patched.json()["current_uses"] == 1
        assert client.post("/discount_codes/validate", json={"code": "SPRING"}).json()["reason"] == "inactive"

        # uses go with the code
        assert client.delete(f"/discount_codes/{code['id']}").status_code == 204
        assert client.get(f"/discount_codes/{code['id']}").status_code == 404


class TestReservationEndpoints:

    def test_eligibility_allowed(self, client):
        body = client.post("/reservations/eligibility", json={"date": "2026-03-17", "action": "cancel"}).json()
        assert body["allowed"] is True
        assert body["business_days"] == 5

    def test_eligibility_too_close(self, client):
        body = client.post("/reservations/eligibility", json={"date": "2026-03-12", "action": "reschedule"}).json()
        assert body["allowed"] is False
        assert body["reason"] == "too_close"

    def test_refund_quote(self, client):
        body = client.post("/reservations/refund-quote", json={
            "payment_method": "conekta",
            "original_price": 1500,
            "history": [
                {"additional_payment_amount": 300, "additional_payment_method": "conekta"},
                {"additional_payment_amount": 100, "additional_payment_method": "cash"},
            ],
        }).json()
        assert Decimal(body["total_card_paid"]) == Decimal("1800")
        assert Decimal(body["refund_amount"]) == Decimal("1440")
        assert Decimal(body["refund_percentage"]) == Decimal("0.8")

    def test_refund_quote_cash(self, client):
        body = client.post("/reservations/refund-quote", json={"payment_method": "cash", "original_price": 1500}).json()
        assert Decimal(body["refund_amount"]) == Decimal("0")

    def test_reschedule_quote_to_weekend(self, client):
        body = client.post("/reservations/reschedule-quote", json={
            "current_price": 1500, "new_date": "2026-03-14", "new_start_time": "18:30",
        }).json()
        assert body["slot_available"] is True
        assert body["new_end_time"] == "19:15:00"
        assert Decimal(body["new_price"]) == Decimal("1800")
        assert body["requires_payment"] is True
        assert Decimal(body["additional_amount"]) == Decimal("300")

    def test_reschedule_quote_taken_slot(self, client):
        client.post("/occupied_slots/", json={"date": "2026-03-10", "start_time": "11:00"})
        body = client.post("/reservations/reschedule-quote", json={
            "current_price": 1800, "new_date": "2026-03-10", "new_start_time": "11:00",
        }).json()
        assert body["slot_available"] is False
        assert body["requires_payment"] is False
        assert Decimal(body["additional_amount"]) == Decimal("0")

    def test_reschedule_quote_off_grid(self, client):
        response = client.post("/reservations/reschedule-quote", json={
            "current_price": 1500, "new_date": "2026-03-15", "new_start_time": "17:00",
        })
        assert response.status_code == 400
