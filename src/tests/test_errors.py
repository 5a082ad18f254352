"""
Test suite for the error taxonomy and ErrorMapper
"""

import pytest
from requests.structures import CaseInsensitiveDict

from payclient.errors import (
    ApiError, ApiErrorResponse, ErrorMapper, ErrorType, FieldError, InternalApiError,
    InvalidApiUsageError, InvalidStateError, PayClientError, RateLimitError, ValidationFailedError
)


def make_error(error_type, code, errors=()):
    return ApiErrorResponse(message='Something went wrong', type=error_type, code=code,
                            request_id='REQ_0001', errors=tuple(errors))


class TestErrorType:
    """Test suite for ErrorType.from_wire"""

    @pytest.mark.parametrize("value, expected", [
        ('gocardless', ErrorType.INTERNAL),
        ('internal', ErrorType.INTERNAL),
        ('invalid_api_usage', ErrorType.INVALID_API_USAGE),
        ('invalid-api-usage', ErrorType.INVALID_API_USAGE),
        ('invalid_state', ErrorType.INVALID_STATE),
        ('validation_failed', ErrorType.VALIDATION_FAILED),
    ])
    def test_from_wire_maps_known_values(self, value, expected):
        """
        Test that wire discriminators map onto their ErrorType
        """
        assert ErrorType.from_wire(value) is expected

    @pytest.mark.parametrize("value", [None, 'teapot'])
    def test_from_wire_rejects_missing_or_unknown_values(self, value):
        """
        Test that missing or unknown discriminators raise ValueError
        """
        with pytest.raises(ValueError):
            ErrorType.from_wire(value)


class TestErrorMapper:
    """Test suite for ErrorMapper.to_exception"""

    @pytest.mark.parametrize("error_type, code, expected", [
        (ErrorType.INTERNAL, 500, InternalApiError),
        (ErrorType.INVALID_API_USAGE, 400, InvalidApiUsageError),
        (ErrorType.INVALID_STATE, 409, InvalidStateError),
        (ErrorType.VALIDATION_FAILED, 422, ValidationFailedError),
    ])
    def test_to_exception_maps_each_type_to_its_class(self, error_type, code, expected):
        """
        Test that each error type maps to exactly one exception class
        """
        # Act
        exception = ErrorMapper.to_exception(make_error(error_type, code))

        # Assert
        assert type(exception) is expected
        assert isinstance(exception, ApiError)
        assert isinstance(exception, PayClientError)

    def test_to_exception_with_rate_limit_reads_reset_header(self):
        """
        Test that 429 responses carry the rate limit reset time
        """
        # Arrange
        headers = CaseInsensitiveDict({'ratelimit-reset': 'Thu, 01 May 2025 16:00:00 GMT'})

        # Act
        exception = ErrorMapper.to_exception(make_error(ErrorType.INVALID_API_USAGE, 429), headers)

        # Assert
        assert isinstance(exception, RateLimitError)
        assert isinstance(exception, InvalidApiUsageError)
        assert exception.reset_at == 'Thu, 01 May 2025 16:00:00 GMT'

    def test_to_exception_with_rate_limit_and_no_headers_leaves_reset_empty(self):
        """
        Test that a 429 without rate limit headers still maps to RateLimitError
        """
        # Act
        exception = ErrorMapper.to_exception(make_error(ErrorType.INVALID_API_USAGE, 429))

        # Assert
        assert isinstance(exception, RateLimitError)
        assert exception.reset_at is None

    def test_status_refinement_only_applies_to_invalid_api_usage(self):
        """
        Test that a 401 status does not change the class of other error types
        """
        # Act
        exception = ErrorMapper.to_exception(make_error(ErrorType.INTERNAL, 401))

        # Assert
        assert type(exception) is InternalApiError


class TestApiError:
    """Test suite for ApiError accessors and messages"""

    def test_accessors_expose_envelope_fields(self):
        """
        Test that the envelope fields are reachable from the exception
        """
        # Arrange
        error = ApiErrorResponse(message='Uh-oh!', type=ErrorType.INTERNAL, code=500,
                                 documentation_url='https://developer.example.com/#internal',
                                 request_id='REQ_0001')

        # Act
        exception = InternalApiError(error)

        # Assert
        assert exception.error_message == 'Uh-oh!'
        assert exception.error_type is ErrorType.INTERNAL
        assert exception.code == 500
        assert exception.request_id == 'REQ_0001'
        assert exception.documentation_url == 'https://developer.example.com/#internal'
        assert exception.errors == ()
        assert str(exception) == 'Uh-oh!'

    def test_message_joins_field_errors(self):
        """
        Test that the exception message lists every field error
        """
        # Arrange
        errors = [
            FieldError(message='must be greater than 0', reason='greater_than', field='amount'),
            FieldError(message='is required', reason='missing_field', field='currency')
        ]

        # Act
        exception = ValidationFailedError(make_error(ErrorType.VALIDATION_FAILED, 422, errors))

        # Assert
        assert str(exception) == 'amount must be greater than 0, currency is required'

    def test_conflicting_resource_id_is_none_without_conflict_reason(self):
        """
        Test that other invalid state reasons do not yield a conflicting resource
        """
        # Arrange
        errors = [FieldError(message='cannot cancel', reason='cancellation_failed',
                             links={'conflicting_resource_id': 'ID999'})]

        # Act
        exception = InvalidStateError(make_error(ErrorType.INVALID_STATE, 409, errors))

        # Assert
        assert exception.conflicting_resource_id() is None

    def test_field_error_from_dict_defaults_missing_keys(self):
        """
        Test that optional field error keys default sensibly
        """
        # Act
        error = FieldError.from_dict({'message': 'is invalid', 'reason': 'invalid'})

        # Assert
        assert error.field is None
        assert error.request_pointer is None
        assert error.links == {}
        assert str(error) == 'is invalid'
