import pytest

from timetabler.core.exceptions import ConfigurationError
from timetabler.schemas.timetable import DEFAULT_TIME_SLOTS, TimeSlot
from timetabler.services.slot_layout import SlotLayout, slot_positions


def test_default_layout_positions_and_breaks():
    layout = SlotLayout(DEFAULT_TIME_SLOTS)

    assert len(layout) == 9
    assert layout.index_of("slot1") == 0
    assert layout.index_of("recess1") == 3
    assert layout.index_of("slot7") == 8
    assert layout.index_of("missing") is None
    assert layout.is_break("recess2")
    assert not layout.is_break("slot4")
    assert not layout.is_break("missing")
    assert [slot.id for slot in layout.teaching_slots] == [
        "slot1", "slot2", "slot3", "slot4", "slot5", "slot6", "slot7",
    ]


def test_double_periods_never_span_a_break():
    layout = SlotLayout(DEFAULT_TIME_SLOTS)

    pairs = [(first.id, second.id) for first, second in layout.double_periods()]

    assert pairs == [("slot1", "slot2"), ("slot2", "slot3"), ("slot4", "slot5"), ("slot5", "slot6")]


def test_next_slot_follows_layout_order():
    layout = SlotLayout(DEFAULT_TIME_SLOTS)

    assert layout.next_slot("slot1").id == "slot2"
    assert layout.next_slot("slot3").id == "recess1"
    assert layout.next_slot("slot7") is None
    assert layout.next_slot("missing") is None


def test_duplicate_slot_ids_are_a_configuration_error():
    slots = [
        TimeSlot(id="slot1", start_time="09:00", end_time="10:00"),
        TimeSlot(id="slot1", start_time="10:00", end_time="11:00"),
    ]

    with pytest.raises(ConfigurationError) as excinfo:
        SlotLayout(slots)

    assert excinfo.value.details == {"duplicates": ["slot1"]}
    # Lookups used by the validator tolerate duplicates.
    assert slot_positions(slots) == {"slot1": 0}


def test_time_slot_rejects_inverted_times():
    with pytest.raises(ValueError):
        TimeSlot(id="bad", start_time="11:00", end_time="10:00")
    with pytest.raises(ValueError):
        TimeSlot(id="bad", start_time="9:00", end_time="10:00")
