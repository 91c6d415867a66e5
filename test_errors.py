"""Tests for the error kinds and store error translation."""

import pytest
from django.db import (DatabaseError, IntegrityError, InterfaceError,
                       OperationalError)
from hamcrest import (assert_that, contains_string, equal_to, has_entries,
                      instance_of, is_, is_not, has_key, same_instance)

from phone_tracker.errors import (DataIntegrityError, InvalidArgument,
                                  NotFound, StoreUnavailable, TrackerError,
                                  translate_store_errors)


class TestErrorKinds:
    """Tests for the stable kinds and HTTP mapping of each error."""

    @pytest.mark.parametrize('error_class, kind, status_code, retryable', [
        (InvalidArgument, 'invalid_argument', 400, False),
        (NotFound, 'not_found', 404, False),
        (DataIntegrityError, 'data_integrity', 500, False),
        (StoreUnavailable, 'store_unavailable', 503, True),
    ])
    def test_kind_table(
        self,
        error_class: type[TrackerError],
        kind: str,
        status_code: int,
        retryable: bool,
    ) -> None:
        """Each error class carries its own kind, status and retry policy."""
        error = error_class("boom", device_id='d1', operation='updateLocation')
        assert_that(error.kind, equal_to(kind))
        assert_that(error.status_code, equal_to(status_code))
        assert_that(error.retryable, is_(retryable))
        assert_that(error, instance_of(TrackerError))

    def test_to_dict(self) -> None:
        """Should serialize kind, message and context."""
        error = StoreUnavailable(
            "Store unavailable", device_id='d1', operation='registerPhone', detail='locked'
        )
        assert_that(error.to_dict(), has_entries(
            kind='store_unavailable',
            message='Store unavailable',
            device_id='d1',
            operation='registerPhone',
            retryable=True,
            detail='locked',
        ))

    def test_to_dict_omits_missing_detail(self) -> None:
        """Should not include detail when there is none."""
        assert_that(NotFound("missing").to_dict(), is_not(has_key('detail')))

    def test_invalid_argument_includes_field(self) -> None:
        """Should name the offending field."""
        error = InvalidArgument("bad latitude", field='latitude')
        assert_that(error.to_dict(), has_entries(field='latitude', kind='invalid_argument'))


class TestTranslateStoreErrors:
    """Tests for translate_store_errors."""

    def test_operational_error_is_store_unavailable(self) -> None:
        """Timeouts and lost connections surface as retryable StoreUnavailable."""
        cause = OperationalError("database is locked")
        with pytest.raises(StoreUnavailable) as exc_info:
            with translate_store_errors('updateLocation', 'd1'):
                raise cause
        error = exc_info.value
        assert_that(error.retryable, is_(True))
        assert_that(error.message, contains_string("'d1'"))
        assert_that(error.message, contains_string('updateLocation'))
        assert_that(error.message, is_not(contains_string('locked')))
        assert_that(error.detail, equal_to('database is locked'))
        assert_that(error.__cause__, same_instance(cause))

    def test_interface_error_is_store_unavailable(self) -> None:
        """A closed connection is transient."""
        with pytest.raises(StoreUnavailable):
            with translate_store_errors('registerPhone', 'd1'):
                raise InterfaceError("connection already closed")

    def test_integrity_error_is_data_integrity(self) -> None:
        """Constraint violations surface as DataIntegrityError."""
        with pytest.raises(DataIntegrityError) as exc_info:
            with translate_store_errors('updateLocation', 'd1'):
                raise IntegrityError("FOREIGN KEY constraint failed")
        assert_that(exc_info.value.retryable, is_(False))
        assert_that(exc_info.value.operation, equal_to('updateLocation'))

    def test_other_database_error_is_data_integrity(self) -> None:
        """Non-transient store faults are not reported as retryable."""
        with pytest.raises(DataIntegrityError):
            with translate_store_errors('getPhoneLocation', 'd1'):
                raise DatabaseError("no such table: devices")

    def test_tracker_errors_pass_through(self) -> None:
        """Errors already in the taxonomy are re-raised untouched."""
        original = NotFound("missing", device_id='d1')
        with pytest.raises(NotFound) as exc_info:
            with translate_store_errors('updateLocation', 'd1'):
                raise original
        assert_that(exc_info.value, same_instance(original))

    def test_other_exceptions_pass_through(self) -> None:
        """Programming errors are not disguised as store errors."""
        with pytest.raises(KeyError):
            with translate_store_errors('updateLocation', 'd1'):
                raise KeyError('latitude')
