"""Unit tests for shipments/store.py -- ShipmentStore repository.

Covers:
- create_shipment() writes an initial "Order received" history entry
- caller-supplied history (seed data) is kept as-is
- case-insensitive tracking-number lookup
- list_by_owner() scoping and creation order
- append_status(): exactly one new entry, default description, carried-forward
  location, no lock after "Delivered", NotFoundError for unknown numbers
- generated tracking numbers are unique and carry the prefix
"""

import pytest

from core.errors import ConflictError, NotFoundError
from shipments.models import HistoryEntry, Shipment
from shipments.store import ShipmentStore, default_estimated_delivery


def _shipment(**kwargs) -> Shipment:
    fields = {"origin": "Berlin, DE", "destination": "Paris, FR", "weight": "3 kg"}
    fields.update(kwargs)
    return Shipment(**fields)


class TestCreateShipment:
    def test_new_shipment_gets_initial_history(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment(), owner_id=5)
        assert created.tracking_number.startswith("FF")
        assert created.status == "Processing"
        assert created.current_location == "Berlin, DE"
        assert created.user_id == 5
        assert len(created.history) == 1
        entry = created.history[0]
        assert entry.status == "Order received"
        assert entry.location == "Berlin, DE"
        assert entry.description == "Shipment order created and processing"

    def test_supplied_history_is_kept(self, shipment_store) -> None:
        history = [
            HistoryEntry("2025-01-01 08:00", "A", "Picked up", "first"),
            HistoryEntry("2025-01-02 08:00", "B", "In transit", "second"),
        ]
        created = shipment_store.create_shipment(_shipment(tracking_number="XX1", history=history))
        assert [h.status for h in created.history] == ["Picked up", "In transit"]
        assert created.user_id is None

    def test_details_round_trip(self, shipment_store) -> None:
        details = {"assetType": "documents", "insured": True}
        created = shipment_store.create_shipment(_shipment(details=details))
        assert created.details == details

    def test_duplicate_tracking_number_conflicts(self, shipment_store) -> None:
        shipment_store.create_shipment(_shipment(tracking_number="FF1"))
        with pytest.raises(ConflictError):
            shipment_store.create_shipment(_shipment(tracking_number="ff1"))
        assert shipment_store.count() == 1

    def test_generated_tracking_numbers_are_unique(self, shipment_store) -> None:
        numbers = {shipment_store.create_shipment(_shipment()).tracking_number for _ in range(20)}
        assert len(numbers) == 20

    def test_custom_prefix(self) -> None:
        store = ShipmentStore(tracking_prefix="PT")
        try:
            assert store.next_tracking_number().startswith("PT")
        finally:
            store.close()


class TestLookups:
    def test_lookup_ignores_case(self, shipment_store) -> None:
        shipment_store.create_shipment(_shipment(tracking_number="FF123ABC"))
        found = shipment_store.get_by_tracking_number("ff123abc")
        assert found is not None
        assert found.tracking_number == "FF123ABC"

    def test_unknown_tracking_number_returns_none(self, shipment_store) -> None:
        assert shipment_store.get_by_tracking_number("NOPE") is None

    def test_list_by_owner(self, shipment_store) -> None:
        a = shipment_store.create_shipment(_shipment(), owner_id=1)
        shipment_store.create_shipment(_shipment(), owner_id=2)
        b = shipment_store.create_shipment(_shipment(), owner_id=1)
        shipment_store.create_shipment(_shipment())
        mine = shipment_store.list_by_owner(1)
        assert [s.tracking_number for s in mine] == [a.tracking_number, b.tracking_number]
        assert len(shipment_store.list_shipments()) == 4


class TestAppendStatus:
    def test_appends_exactly_one_entry(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment(), owner_id=1)
        updated = shipment_store.append_status(created.tracking_number, "In Transit", location="Hanover, DE")
        assert updated.status == "In Transit"
        assert updated.current_location == "Hanover, DE"
        assert len(updated.history) == len(created.history) + 1
        last = updated.history[-1]
        assert last.status == "In Transit"
        assert last.location == "Hanover, DE"
        assert last.description == "Status updated to In Transit"

    def test_existing_entries_unchanged(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment())
        updated = shipment_store.append_status(created.tracking_number, "Picked up")
        assert updated.history[: len(created.history)] == created.history

    def test_location_carried_forward(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment())
        shipment_store.append_status(created.tracking_number, "In Transit", location="Cologne, DE")
        updated = shipment_store.append_status(created.tracking_number, "Held at customs")
        assert updated.current_location == "Cologne, DE"
        assert updated.history[-1].location == "Cologne, DE"

    def test_caller_description_used(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment())
        updated = shipment_store.append_status(created.tracking_number, "Delayed", description="Snowstorm")
        assert updated.history[-1].description == "Snowstorm"

    def test_delivered_shipment_can_be_updated_again(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment())
        shipment_store.append_status(created.tracking_number, "Delivered", location="Paris, FR")
        updated = shipment_store.append_status(created.tracking_number, "Returned to sender")
        assert updated.status == "Returned to sender"
        assert len(updated.history) == 3

    def test_lookup_by_lower_case_number(self, shipment_store) -> None:
        created = shipment_store.create_shipment(_shipment(tracking_number="FFCASE1"))
        updated = shipment_store.append_status("ffcase1", "Out for delivery")
        assert updated.tracking_number == created.tracking_number
        assert len(shipment_store.get_by_tracking_number("FFCASE1").history) == 2

    def test_unknown_tracking_number_raises(self, shipment_store) -> None:
        with pytest.raises(NotFoundError):
            shipment_store.append_status("MISSING", "Lost")


def test_default_estimated_delivery_is_five_days_out() -> None:
    from datetime import date

    assert default_estimated_delivery(date(2025, 1, 28)) == "2025-02-02"
