from datetime import date
from unittest import mock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from gymschedule.models.schedule import ClassInstance, ClassInstanceStatus, ClassSeries
from gymschedule.repositories.schedule import ClassInstanceRepository, ClassSeriesRepository
from gymschedule.schemas.schedule import CancelScope
from gymschedule.services.recurrence import (
    RecurrenceEngine,
    InstanceNotFound,
    InstanceLoadFailure,
    CancelFailure
)


@pytest.fixture
def monday_series(db, make_series):
    """Serie de lunes con las 5 clases de enero de 2024 ya generadas."""
    series = make_series(weekday=1, period_start=date(2024, 1, 1))
    RecurrenceEngine(db).generate(date(2024, 1, 1), date(2024, 1, 31))
    return series


def _series_instances(db, series_id):
    db.expire_all()
    return (
        db.query(ClassInstance)
        .filter(ClassInstance.series_id == series_id)
        .order_by(ClassInstance.date)
        .all()
    )


def test_cancel_single_leaves_siblings_and_series(db, monday_series):
    instances = _series_instances(db, monday_series.id)
    target = instances[2]

    result = RecurrenceEngine(db).cancel(target.id, scope=CancelScope.SINGLE)

    assert result.ok is True
    assert result.scope == CancelScope.SINGLE
    statuses = [i.status for i in _series_instances(db, monday_series.id)]
    assert statuses == [
        ClassInstanceStatus.SCHEDULED,
        ClassInstanceStatus.SCHEDULED,
        ClassInstanceStatus.CANCELED,
        ClassInstanceStatus.SCHEDULED,
        ClassInstanceStatus.SCHEDULED,
    ]
    series = db.get(ClassSeries, monday_series.id)
    assert series.active is True
    assert series.period_end is None


def test_cancel_defaults_to_single(db, monday_series):
    target = _series_instances(db, monday_series.id)[0]

    result = RecurrenceEngine(db).cancel(target.id)

    assert result.scope == CancelScope.SINGLE
    assert db.get(ClassSeries, monday_series.id).active is True


def test_cancel_future_truncates_series(db, monday_series):
    third = _series_instances(db, monday_series.id)[2]
    assert third.date == date(2024, 1, 15)

    result = RecurrenceEngine(db).cancel(third.id, scope=CancelScope.FUTURE)

    assert result.scope == CancelScope.FUTURE
    instances = _series_instances(db, monday_series.id)
    assert [i.status for i in instances[:2]] == [ClassInstanceStatus.SCHEDULED] * 2
    assert [i.status for i in instances[2:]] == [ClassInstanceStatus.CANCELED] * 3

    series = db.get(ClassSeries, monday_series.id)
    # Domingo anterior al lunes cancelado
    assert series.period_end == date(2024, 1, 14)
    assert series.active is True


def test_cancel_future_from_first_instance_deactivates_series(db, monday_series):
    first = _series_instances(db, monday_series.id)[0]

    RecurrenceEngine(db).cancel(first.id, scope=CancelScope.FUTURE)

    assert all(i.status == ClassInstanceStatus.CANCELED for i in _series_instances(db, monday_series.id))
    series = db.get(ClassSeries, monday_series.id)
    assert series.active is False
    assert series.period_end == date(2023, 12, 31)


def test_truncated_series_stops_generating(db, monday_series):
    third = _series_instances(db, monday_series.id)[2]
    engine = RecurrenceEngine(db)
    engine.cancel(third.id, scope=CancelScope.FUTURE)

    result = engine.generate(date(2024, 2, 1), date(2024, 2, 29))

    assert result.created == 0


def test_cancel_future_twice_is_idempotent(db, monday_series):
    third = _series_instances(db, monday_series.id)[2]
    engine = RecurrenceEngine(db)

    engine.cancel(third.id, scope=CancelScope.FUTURE)
    engine.cancel(third.id, scope=CancelScope.FUTURE)

    instances = _series_instances(db, monday_series.id)
    assert [i.status for i in instances[2:]] == [ClassInstanceStatus.CANCELED] * 3
    series = db.get(ClassSeries, monday_series.id)
    assert series.period_end == date(2024, 1, 14)
    assert series.active is True


def test_cancel_future_without_series_is_single(db, make_instance):
    instance = make_instance()

    result = RecurrenceEngine(db).cancel(instance.id, scope=CancelScope.FUTURE)

    assert result.scope == CancelScope.SINGLE
    db.refresh(instance)
    assert instance.status == ClassInstanceStatus.CANCELED


def test_cancel_accepts_scope_as_string(db, make_instance):
    instance = make_instance()

    result = RecurrenceEngine(db).cancel(instance.id, scope="single")

    assert result.scope == CancelScope.SINGLE


def test_cancel_unknown_instance(db):
    with pytest.raises(InstanceNotFound):
        RecurrenceEngine(db).cancel(99999)


def test_cancel_future_with_missing_series_skips_truncation(db, make_instance):
    instance = make_instance(series_id=4242)
    series_repo = ClassSeriesRepository(ClassSeries)

    with mock.patch.object(series_repo, "update") as update:
        result = RecurrenceEngine(db, series_repo=series_repo).cancel(instance.id, scope=CancelScope.FUTURE)

    assert result.scope == CancelScope.FUTURE
    update.assert_not_called()
    db.refresh(instance)
    assert instance.status == ClassInstanceStatus.CANCELED


def test_cancel_load_failure(db):
    instance_repo = mock.MagicMock()
    instance_repo.get.side_effect = SQLAlchemyError("sin conexión")

    with pytest.raises(InstanceLoadFailure):
        RecurrenceEngine(db, instance_repo=instance_repo).cancel(1)

    instance_repo.update.assert_not_called()


def test_cancel_write_failure_is_reported(db, make_instance):
    instance = make_instance()
    instance_repo = ClassInstanceRepository(ClassInstance)

    with mock.patch.object(instance_repo, "update", side_effect=SQLAlchemyError("rechazado")):
        with pytest.raises(CancelFailure):
            RecurrenceEngine(db, instance_repo=instance_repo).cancel(instance.id)


def test_series_truncation_failure_is_reported(db, monday_series):
    third = _series_instances(db, monday_series.id)[2]
    series_repo = ClassSeriesRepository(ClassSeries)

    with mock.patch.object(series_repo, "update", side_effect=SQLAlchemyError("rechazado")):
        with pytest.raises(CancelFailure) as exc_info:
            RecurrenceEngine(db, series_repo=series_repo).cancel(third.id, scope=CancelScope.FUTURE)

    assert "serie" in str(exc_info.value)
    # Las clases sí quedaron canceladas
    instances = _series_instances(db, monday_series.id)
    assert [i.status for i in instances[2:]] == [ClassInstanceStatus.CANCELED] * 3
