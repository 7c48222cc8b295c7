import pytest

from timetabler.core.exceptions import AppError, ConfigurationError, InvalidTimetableInputError, SchedulerError
from timetabler.services.timetable_generator import generate_timetable
from timetabler.services.validator import validate_timetable


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_invalid_input_error_names_the_argument():
    err = InvalidTimetableInputError("courses")
    assert isinstance(err, SchedulerError)
    assert err.status_code == 422
    assert err.message == "courses must be a list, got None"
    assert err.details == {"argument": "courses"}


def test_configuration_error_is_a_server_error():
    err = ConfigurationError("Time slot ids must be unique")
    assert err.status_code == 500
    assert err.details == {}


@pytest.mark.parametrize("argument", ["teachers", "classrooms", "courses"])
def test_generate_rejects_missing_collections(argument):
    inputs = {"teachers": [], "classrooms": [], "courses": []}
    inputs[argument] = None

    with pytest.raises(InvalidTimetableInputError) as excinfo:
        generate_timetable(inputs["teachers"], inputs["classrooms"], inputs["courses"])

    assert excinfo.value.details == {"argument": argument}


def test_validate_rejects_missing_entries(time_slots):
    with pytest.raises(InvalidTimetableInputError) as excinfo:
        validate_timetable(None, [], [], [], time_slots)

    assert excinfo.value.message == "entries must be a list, got None"
