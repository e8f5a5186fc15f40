"""
Unit tests for error types.
"""

from not_so_fast.errors import ConfigurationError, ErrorResponse, ExhaustionError, LimiterException


class TestErrors:
    """Test cases for limiter errors."""

    def test_exhaustion_error_defaults(self):
        """Test the exhaustion error message and code."""
        error = ExhaustionError()

        assert str(error) == "No tokens available"
        assert error.code == "RATE_LIMIT_ERROR"
        assert error.namespace is None
        assert error.details == {}

    def test_exhaustion_error_namespace(self):
        """Test the namespace is kept and reported in details."""
        error = ExhaustionError("127.0.0.1")

        assert error.namespace == "127.0.0.1"
        assert error.details == {"namespace": "127.0.0.1"}
        assert str(error) == "No tokens available"

    def test_configuration_error_defaults(self):
        """Test the configuration error message and code."""
        error = ConfigurationError()

        assert str(error) == "Invalid or missing options"
        assert error.code == "CONFIGURATION_ERROR"

    def test_hierarchy(self):
        """Test both errors share the base exception."""
        assert isinstance(ExhaustionError(), LimiterException)
        assert isinstance(ConfigurationError(), LimiterException)

    def test_to_response(self):
        """Test conversion to an error response."""
        response = ExhaustionError("x").to_response()

        assert isinstance(response, ErrorResponse)
        assert response.model_dump() == {
            "code": "RATE_LIMIT_ERROR",
            "message": "No tokens available",
            "details": {"namespace": "x"}
        }
