import threading

import pytest

from hostel_allocation.core.exceptions import (
    AssetNotFoundError,
    AssetOccupiedError,
    ConflictError,
    DuplicateEntryError,
    ValidationError,
)
from hostel_allocation.models.base.enums import AssetState
from hostel_allocation.repositories.inventory.asset_registry import AssetRegistry


def test_create_asset_starts_available_with_generated_identifiers(session, make_asset):
    asset = make_asset(category="bed")

    assert asset.state == AssetState.AVAILABLE
    assert asset.occupant_id is None
    assert asset.external_code.startswith("BED-")
    assert len(asset.public_slug) == 10


def test_create_asset_ignores_supplied_state(session):
    registry = AssetRegistry(session)
    asset = registry.create_asset({
        "category": "bed",
        "item_name": "Bed X",
        "location": "Block A",
        "room_label": "102",
        "state": AssetState.OCCUPIED,
        "occupant_id": "someone",
    })
    session.commit()

    assert asset.state == AssetState.AVAILABLE
    assert asset.occupant_id is None


def test_duplicate_external_code_rejected(session, make_asset):
    make_asset(external_code="BED-0001")

    with pytest.raises(DuplicateEntryError):
        make_asset(external_code="BED-0001")


def test_external_code_cannot_change(session, make_asset):
    asset = make_asset()

    with pytest.raises(ValueError):
        asset.external_code = "BED-CHANGED"


def test_public_slug_cannot_change(session, make_asset):
    asset = make_asset()

    with pytest.raises(ValueError):
        asset.public_slug = "abcdefghij"


def test_lookups_by_identifier(session, make_asset):
    asset = make_asset()
    registry = AssetRegistry(session)

    assert registry.get_by_external_code(asset.external_code).id == asset.id
    assert registry.get_by_public_slug(asset.public_slug).id == asset.id
    with pytest.raises(AssetNotFoundError):
        registry.get("missing")
    with pytest.raises(AssetNotFoundError):
        registry.get_by_public_slug("nope")


def test_try_reserve_is_compare_and_set(session, make_asset, make_resident):
    asset = make_asset()
    first = make_resident()
    second = make_resident()
    registry = AssetRegistry(session)

    reserved = registry.try_reserve(asset.id, first.id)
    assert reserved.state == AssetState.OCCUPIED
    assert reserved.occupant_id == first.id

    with pytest.raises(ConflictError):
        registry.try_reserve(asset.id, second.id)

    assert registry.get(asset.id).occupant_id == first.id


def test_try_reserve_rejects_occupied_expectation(session, make_asset, make_resident):
    asset = make_asset()
    resident = make_resident()

    with pytest.raises(ValidationError):
        AssetRegistry(session).try_reserve(asset.id, resident.id, AssetState.OCCUPIED)


def test_try_reserve_unknown_asset(session, make_resident):
    resident = make_resident()

    with pytest.raises(AssetNotFoundError):
        AssetRegistry(session).try_reserve("missing", resident.id)


def test_release_is_idempotent(session, make_asset, make_resident):
    asset = make_asset()
    resident = make_resident()
    registry = AssetRegistry(session)
    registry.try_reserve(asset.id, resident.id)

    first = registry.release(asset.id)
    second = registry.release(asset.id)

    assert first.state == second.state == AssetState.AVAILABLE
    assert second.occupant_id is None


def test_release_does_not_touch_asset_in_maintenance(session, make_asset):
    asset = make_asset()
    registry = AssetRegistry(session)
    registry.set_maintenance_state(asset.id, AssetState.IN_MAINTENANCE)

    assert registry.release(asset.id).state == AssetState.IN_MAINTENANCE


def test_release_with_wrong_expected_occupant_conflicts(session, make_asset, make_resident):
    asset = make_asset()
    holder = make_resident()
    other = make_resident()
    registry = AssetRegistry(session)
    registry.try_reserve(asset.id, holder.id)

    with pytest.raises(ConflictError):
        registry.release(asset.id, expected_occupant_id=other.id)

    assert registry.get(asset.id).occupant_id == holder.id


@pytest.mark.parametrize("target", [AssetState.IN_MAINTENANCE, AssetState.DAMAGED])
def test_maintenance_on_occupied_asset_never_mutates(session, make_asset, make_resident, target):
    asset = make_asset()
    resident = make_resident()
    registry = AssetRegistry(session)
    registry.try_reserve(asset.id, resident.id)

    with pytest.raises(AssetOccupiedError):
        registry.set_maintenance_state(asset.id, target)

    current = registry.get(asset.id)
    assert current.state == AssetState.OCCUPIED
    assert current.occupant_id == resident.id


def test_maintenance_round_trip(session, make_asset):
    asset = make_asset()
    registry = AssetRegistry(session)

    assert registry.set_maintenance_state(asset.id, AssetState.DAMAGED).state == AssetState.DAMAGED
    assert registry.set_maintenance_state(asset.id, AssetState.AVAILABLE).state == AssetState.AVAILABLE


def test_maintenance_cannot_target_occupied(session, make_asset):
    asset = make_asset()

    with pytest.raises(ValidationError):
        AssetRegistry(session).set_maintenance_state(asset.id, AssetState.OCCUPIED)


def test_asset_in_maintenance_cannot_be_reserved(session, make_asset, make_resident):
    asset = make_asset()
    resident = make_resident()
    registry = AssetRegistry(session)
    registry.set_maintenance_state(asset.id, AssetState.IN_MAINTENANCE)

    with pytest.raises(ConflictError):
        registry.try_reserve(asset.id, resident.id)


def test_delete_occupied_asset_refused(session, make_asset, make_resident):
    asset = make_asset()
    resident = make_resident()
    registry = AssetRegistry(session)
    registry.try_reserve(asset.id, resident.id)

    with pytest.raises(AssetOccupiedError):
        registry.delete_asset(asset.id)


def test_list_available_filters(session, make_asset, make_resident):
    a1 = make_asset(item_name="Bunk Bed A1", room_label="101")
    make_asset(item_name="Study Table", category="furniture", room_label="101")
    taken = make_asset(item_name="Bunk Bed A2", room_label="102")
    registry = AssetRegistry(session)
    registry.try_reserve(taken.id, make_resident().id)

    beds = registry.list_available(category="bed")
    assert [a.id for a in beds] == [a1.id]

    by_name = registry.list_available(item_name="bunk")
    assert [a.id for a in by_name] == [a1.id]


def test_occupancy_summary(session, make_asset, make_resident):
    registry = AssetRegistry(session)
    occupied = make_asset()
    make_asset()
    damaged = make_asset()
    make_asset(category="furniture")
    registry.try_reserve(occupied.id, make_resident().id)
    registry.set_maintenance_state(damaged.id, AssetState.DAMAGED)

    assert registry.occupancy_summary("bed") == {
        "total": 3,
        "occupied": 1,
        "available": 1,
        "in_maintenance": 0,
        "damaged": 1,
    }
    assert registry.occupancy_summary()["total"] == 4


def test_simultaneous_reservations_have_one_winner(database, make_asset, make_resident):
    asset = make_asset()
    claimants = [make_resident().id for _ in range(6)]
    barrier = threading.Barrier(len(claimants))
    outcomes = {}

    def claim(resident_id):
        s = database.session()
        try:
            registry = AssetRegistry(s)
            # Every claimant has seen the asset as Available before anyone writes
            assert registry.get(asset.id).state == AssetState.AVAILABLE
            barrier.wait(timeout=10)
            registry.try_reserve(asset.id, resident_id)
            s.commit()
            outcomes[resident_id] = "ok"
        except ConflictError:
            s.rollback()
            outcomes[resident_id] = "conflict"
        except Exception as e:
            s.rollback()
            outcomes[resident_id] = repr(e)
        finally:
            s.close()

    threads = [threading.Thread(target=claim, args=(rid,)) for rid in claimants]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(outcomes.values()) == ["conflict"] * 5 + ["ok"]
    [winner] = [rid for rid, outcome in outcomes.items() if outcome == "ok"]

    s = database.session()
    try:
        held = AssetRegistry(s).get(asset.id)
        assert held.state == AssetState.OCCUPIED
        assert held.occupant_id == winner
    finally:
        s.close()
