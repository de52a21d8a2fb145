from datetime import date, datetime, timedelta, timezone
from math import degrees

import pytest

from geogate.core.geo import GeoPoint
from geogate.domain.models import PositionSample, ReasonCode, TaskKind, TaskWindow
from geogate.eligibility.evaluator import EligibilityPolicy, effective_radius, evaluate

TODAY = date(2026, 3, 2)
TARGET = GeoPoint(latitude=41.2995, longitude=69.2401)


def _north_of(point: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(latitude=point.latitude + degrees(meters / 6_371_000), longitude=point.longitude)


def _sample(point: GeoPoint, accuracy: float = 20.0) -> PositionSample:
    return PositionSample(
        point=point,
        accuracy_meters=accuracy,
        captured_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
    )


def _internship(**kwargs) -> TaskWindow:
    kwargs.setdefault("scheduled_date", TODAY)
    kwargs.setdefault("target_location", TARGET)
    return TaskWindow(task_kind=TaskKind.INTERNSHIP, **kwargs)


@pytest.mark.parametrize(
    "sample",
    [None, _sample(_north_of(TARGET, 50_000), accuracy=5_000)],
)
def test_homework_is_always_allowed(sample):
    window = TaskWindow(
        task_kind=TaskKind.HOMEWORK,
        scheduled_date=TODAY - timedelta(days=3),
        target_location=TARGET,
    )
    verdict = evaluate(window, sample, TODAY)
    assert verdict.allowed is True
    assert verdict.reason_code is ReasonCode.NOT_APPLICABLE
    assert verdict.distance_meters is None


def test_no_target_location_fails_open_on_the_right_day():
    verdict = evaluate(_internship(target_location=None), None, TODAY)
    assert verdict.allowed is True
    assert verdict.reason_code is ReasonCode.NO_LOCATION_CONFIGURED
    assert verdict.distance_meters is None


def test_no_target_location_still_checks_the_date():
    window = _internship(target_location=None, scheduled_date=TODAY + timedelta(days=1))
    verdict = evaluate(window, _sample(TARGET), TODAY)
    assert verdict.allowed is False
    assert verdict.reason_code is ReasonCode.WRONG_DATE
    assert verdict.distance_meters is None


def test_missing_sample_blocks():
    verdict = evaluate(_internship(), None, TODAY)
    assert verdict.allowed is False
    assert verdict.reason_code is ReasonCode.LOCATION_NOT_ACQUIRED
    assert verdict.distance_meters is None


def test_within_radius_on_the_day_is_ok():
    verdict = evaluate(_internship(), _sample(_north_of(TARGET, 120)), TODAY)
    assert verdict.allowed is True
    assert verdict.reason_code is ReasonCode.OK
    assert verdict.distance_meters == pytest.approx(120, abs=0.5)
    assert verdict.issues == ()


def test_too_far_with_good_accuracy():
    verdict = evaluate(_internship(allowed_radius_meters=500), _sample(_north_of(TARGET, 600), accuracy=50), TODAY)
    assert verdict.allowed is False
    assert verdict.reason_code is ReasonCode.TOO_FAR
    assert verdict.distance_meters == pytest.approx(600, abs=0.5)


def test_too_far_with_low_accuracy_is_inconclusive():
    verdict = evaluate(_internship(allowed_radius_meters=500), _sample(_north_of(TARGET, 600), accuracy=250), TODAY)
    assert verdict.allowed is False
    assert verdict.reason_code is ReasonCode.GPS_ACCURACY_TOO_LOW
    assert verdict.distance_meters == pytest.approx(600, abs=0.5)


def test_low_accuracy_inside_radius_is_still_ok():
    verdict = evaluate(_internship(), _sample(_north_of(TARGET, 100), accuracy=900), TODAY)
    assert verdict.allowed is True
    assert verdict.reason_code is ReasonCode.OK


def test_wrong_date_with_location_satisfied():
    window = _internship(scheduled_date=TODAY - timedelta(days=1))
    verdict = evaluate(window, _sample(_north_of(TARGET, 10)), TODAY)
    assert verdict.allowed is False
    assert verdict.reason_code is ReasonCode.WRONG_DATE
    assert verdict.distance_meters == pytest.approx(10, abs=0.5)


def test_wrong_date_and_too_far_are_both_reported():
    window = _internship(scheduled_date=TODAY + timedelta(days=7))
    verdict = evaluate(window, _sample(_north_of(TARGET, 734)), TODAY)
    assert verdict.reason_code is ReasonCode.WRONG_DATE
    assert verdict.issues == (ReasonCode.WRONG_DATE, ReasonCode.TOO_FAR)
    assert verdict.distance_meters == pytest.approx(734, abs=0.5)


def test_unscheduled_internship_only_checks_distance():
    verdict = evaluate(_internship(scheduled_date=None), _sample(TARGET), TODAY)
    assert verdict.allowed is True
    assert verdict.reason_code is ReasonCode.OK
    assert verdict.distance_meters == 0


def test_policy_supplies_default_radius_and_accuracy_threshold():
    policy = EligibilityPolicy(default_radius_meters=1000, accuracy_threshold_meters=300)
    window = _internship()
    assert effective_radius(window) == 500
    assert effective_radius(window, policy) == 1000

    verdict = evaluate(window, _sample(_north_of(TARGET, 800), accuracy=250), TODAY, policy=policy)
    assert verdict.allowed is True

    verdict = evaluate(window, _sample(_north_of(TARGET, 1500), accuracy=250), TODAY, policy=policy)
    assert verdict.reason_code is ReasonCode.TOO_FAR


def test_policy_rejects_non_positive_thresholds():
    with pytest.raises(ValueError):
        EligibilityPolicy(default_radius_meters=0)
    with pytest.raises(ValueError):
        EligibilityPolicy(accuracy_threshold_meters=-1)
