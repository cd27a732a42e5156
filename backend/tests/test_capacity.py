"""
Unit tests for truck capacity lookup.
"""

import pytest

from backend.app.domain.dispatch.capacity import TRUCK_CAPACITY, build_capacity_report, capacity_for
from backend.app.models.fleet_enums import TruckType


def test_every_truck_type_has_a_capacity():
    assert set(TRUCK_CAPACITY) == set(TruckType)
    assert capacity_for(TruckType.SEVEN_CAR) == 7
    assert capacity_for(None) is None


@pytest.mark.parametrize("utilization, warning", [(6, False), (7, False), (8, True)])
def test_warning_only_above_capacity(utilization, warning):
    report = build_capacity_report(1, TruckType.SEVEN_CAR, utilization)
    assert report.warning is warning
    assert report.remaining == 7 - utilization


def test_no_truck_never_warns():
    report = build_capacity_report(1, None, 12)
    assert report.capacity is None
    assert report.warning is False
    assert report.remaining is None
