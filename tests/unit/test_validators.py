"""Unit tests for container and cargo validators."""

from datetime import date, datetime, timedelta

import pytest
from src.core.exceptions import (
    CheckDigitError,
    RangeValidationError,
    StructuralValidationError,
)
from src.core.validators import (
    LETTER_VALUES,
    ValidationResult,
    compute_check_digit,
    is_last_free_day_passed,
    is_overweight,
    validate_appointment_time,
    validate_container,
    validate_container_number,
    validate_coordinates,
    validate_hazmat,
    validate_reefer,
    validate_shipment_dates,
    validate_weight,
)
from src.models.records import ShipmentDates
from src.models.schema import WeightRules
from tests.test_fixtures import VALID_CONTAINER_NUMBER, create_container


class TestLetterValues:
    """Test the ISO 6346 letter table."""

    def test_skips_multiples_of_eleven(self):
        assert LETTER_VALUES["A"] == 10
        assert LETTER_VALUES["B"] == 12
        assert LETTER_VALUES["K"] == 21
        assert LETTER_VALUES["L"] == 23
        assert LETTER_VALUES["U"] == 32
        assert LETTER_VALUES["V"] == 34
        assert LETTER_VALUES["Z"] == 38
        assert not any(value % 11 == 0 for value in LETTER_VALUES.values())


class TestContainerNumber:
    """Test ISO 6346 container number validation."""

    def test_compute_check_digit(self):
        assert compute_check_digit("CSQU305438") == 3

    def test_check_digit_ten_maps_to_zero(self):
        """A weighted sum of 10 mod 11 gives check digit 0."""
        # 10 + 20 + 40 + 32*8 + 5*16 = 406, 406 % 11 == 10
        assert compute_check_digit("AAAU500000") == 0

    def test_compute_check_digit_bad_input(self):
        with pytest.raises(ValueError):
            compute_check_digit("CSQU30543")
        with pytest.raises(ValueError):
            compute_check_digit("CSQU30543*")

    def test_valid_number(self):
        result = validate_container_number(VALID_CONTAINER_NUMBER)
        assert result.ok
        assert result.error is None
        assert bool(result) is True

    @pytest.mark.parametrize("last_digit", ["0", "1", "2", "4", "5", "6", "7", "8", "9"])
    def test_wrong_check_digit(self, last_digit):
        result = validate_container_number("CSQU305438" + last_digit)
        assert not result.ok
        assert isinstance(result.error, CheckDigitError)
        assert result.error.expected == 3
        assert result.error.actual == int(last_digit)
        assert result.error.rule == "container.check_digit"

    @pytest.mark.parametrize("number", ["CSQU305438", "CSQU30543831", ""])
    def test_wrong_length(self, number):
        result = validate_container_number(number)
        assert isinstance(result.error, StructuralValidationError)
        assert result.error.rule == "container.length"

    def test_lowercase_owner_code(self):
        result = validate_container_number("csqU3054383")
        assert result.error.rule == "container.owner_code"

    def test_digit_in_owner_code(self):
        result = validate_container_number("C5QU3054383")
        assert result.error.rule == "container.owner_code"

    def test_bad_category(self):
        result = validate_container_number("CSQX3054383")
        assert isinstance(result.error, StructuralValidationError)
        assert result.error.rule == "container.category"

    @pytest.mark.parametrize("number", ["CSQU30543A3", "CSQU305438X"])
    def test_bad_serial(self, number):
        result = validate_container_number(number)
        assert result.error.rule == "container.serial"

    def test_raise_for_error(self):
        with pytest.raises(CheckDigitError):
            validate_container_number("CSQU3054384").raise_for_error()
        validate_container_number(VALID_CONTAINER_NUMBER).raise_for_error()


class TestWeight:
    """Test gross weight checks."""

    def test_within_limit(self):
        assert validate_weight(44000, WeightRules()).ok

    def test_at_limit(self):
        assert validate_weight(67200, WeightRules()).ok

    def test_over_limit(self):
        result = validate_weight(67201, WeightRules())
        assert isinstance(result.error, RangeValidationError)
        assert result.error.rule == "weight.max_gross"

    @pytest.mark.parametrize("weight", [0, -100])
    def test_not_positive(self, weight):
        assert validate_weight(weight, WeightRules()).error.rule == "weight.positive"

    def test_overweight_threshold(self):
        rules = WeightRules()
        assert is_overweight(44001, rules)
        assert not is_overweight(44000, rules)


class TestHazmat:
    """Test hazardous materials checks."""

    def test_valid_hazmat(self):
        assert validate_hazmat(True, "3", "UN1203").ok

    def test_subdivision_class(self):
        assert validate_hazmat(True, "2.1", "UN1075").ok

    def test_not_hazmat_ignores_fields(self):
        assert validate_hazmat(False, None, None).ok
        assert validate_hazmat(False, "bogus", "bogus").ok

    def test_missing_class(self):
        assert validate_hazmat(True, None, "UN1203").error.rule == "hazmat.class_required"

    def test_missing_un_number(self):
        result = validate_hazmat(True, "3", None)
        assert isinstance(result.error, StructuralValidationError)
        assert result.error.rule == "hazmat.un_number_required"

    @pytest.mark.parametrize("un_number", ["1203", "UN123", "UN12034", "un1203"])
    def test_bad_un_number(self, un_number):
        assert validate_hazmat(True, "3", un_number).error.rule == "hazmat.un_number_format"

    @pytest.mark.parametrize("hazmat_class", ["0", "10", "3.", "A"])
    def test_bad_class(self, hazmat_class):
        assert validate_hazmat(True, hazmat_class, "UN1203").error.rule == "hazmat.class_format"


class TestReefer:
    """Test reefer setpoint checks."""

    def test_valid_setpoint(self):
        assert validate_reefer(True, -18.0).ok

    @pytest.mark.parametrize("setpoint", [-30.0, 30.0])
    def test_setpoint_bounds(self, setpoint):
        assert validate_reefer(True, setpoint).ok

    def test_missing_setpoint(self):
        assert validate_reefer(True, None).error.rule == "reefer.setpoint_required"

    @pytest.mark.parametrize("setpoint", [-30.5, 31.0])
    def test_out_of_range(self, setpoint):
        result = validate_reefer(True, setpoint)
        assert isinstance(result.error, RangeValidationError)

    def test_dry_container(self):
        assert validate_reefer(False, None).ok

    def test_nan_setpoint_rejected(self):
        result = validate_reefer(True, float("nan"))
        assert result.error.rule == "reefer.setpoint_range"


class TestCoordinates:
    def test_valid(self):
        assert validate_coordinates(33.75, -118.22).ok
        assert validate_coordinates(-90, 180).ok

    def test_bad_latitude(self):
        assert validate_coordinates(90.1, 0).error.field == "latitude"

    def test_bad_longitude(self):
        assert validate_coordinates(0, -180.5).error.field == "longitude"

    @pytest.mark.parametrize("latitude,longitude,field", [
        (float("nan"), 0.0, "latitude"),
        (0.0, float("nan"), "longitude"),
    ])
    def test_nan_rejected(self, latitude, longitude, field):
        assert validate_coordinates(latitude, longitude).error.field == field


class TestShipmentDates:
    """Test date ordering checks."""

    def test_valid_dates(self):
        dates = ShipmentDates(
            vessel_eta=date(2024, 3, 1),
            last_free_day=date(2024, 3, 5),
            documentation_cutoff=datetime(2024, 3, 10, 12),
            port_cutoff=datetime(2024, 3, 11, 12),
        )
        assert validate_shipment_dates(dates).ok

    def test_unknown_dates_skipped(self):
        assert validate_shipment_dates(ShipmentDates()).ok

    def test_lfd_before_eta(self):
        dates = ShipmentDates(vessel_eta=date(2024, 3, 5), last_free_day=date(2024, 3, 1))
        assert validate_shipment_dates(dates).error.field == "last_free_day"

    def test_both_failures_reported(self):
        dates = ShipmentDates(
            vessel_eta=date(2024, 3, 5),
            last_free_day=date(2024, 3, 1),
            documentation_cutoff=datetime(2024, 3, 11),
            port_cutoff=datetime(2024, 3, 10),
        )
        result = validate_shipment_dates(dates)
        assert [error.field for error in result.errors] == ["last_free_day", "port_cutoff"]


class TestAppointmentTime:
    NOW = datetime(2024, 3, 1, 9, 0)

    def test_future_appointment(self):
        assert validate_appointment_time(self.NOW + timedelta(hours=3), self.NOW, 2).ok

    def test_in_past(self):
        result = validate_appointment_time(self.NOW - timedelta(minutes=1), self.NOW, 2)
        assert result.error.rule == "appointment.in_past"

    def test_too_soon(self):
        result = validate_appointment_time(self.NOW + timedelta(hours=1), self.NOW, 2)
        assert result.error.rule == "appointment.min_advance"
        assert "2 hours" in result.error.message


class TestValidateContainer:
    """Test the combined intake check."""

    def test_valid_container(self):
        assert validate_container(create_container(), WeightRules()).ok

    def test_collects_every_failure(self):
        container = create_container(
            container_number="CSQU3054384",
            weight_lbs=70000,
            is_hazmat=True,
            hazmat_class="3",
            is_reefer=True,
        )
        result = validate_container(container, WeightRules())
        assert [error.rule for error in result.errors] == [
            "container.check_digit",
            "weight.max_gross",
            "hazmat.un_number_required",
            "reefer.setpoint_required",
        ]

    def test_unweighed_container(self):
        assert validate_container(create_container(weight_lbs=None), WeightRules()).ok


class TestValidationResult:
    def test_merge(self):
        failure = validate_weight(0, WeightRules())
        merged = ValidationResult.success().merge(failure).merge(failure)
        assert len(merged.errors) == 2
        assert not merged


class TestLastFreeDay:
    def test_on_last_free_day(self):
        assert not is_last_free_day_passed(date(2024, 3, 5), date(2024, 3, 5))

    def test_after_last_free_day(self):
        assert is_last_free_day_passed(date(2024, 3, 5), date(2024, 3, 6))

    def test_unknown(self):
        assert not is_last_free_day_passed(None, date(2024, 3, 6))
