"""
Test suite for the package's public surface
"""

import importlib


class TestPackageImport:
    """Test suite for importing payclient"""

    def test_package_imports_and_exports_public_names(self):
        """
        Test that the package loads and every name in __all__ resolves
        """
        # Act
        payclient = importlib.import_module('payclient')

        # Assert
        missing = [name for name in payclient.__all__ if not hasattr(payclient, name)]
        assert missing == []

    def test_field_error_links_default_to_empty_mapping(self):
        """
        Test that FieldError instances get their own empty links mapping
        """
        # Arrange
        from payclient.errors import FieldError

        # Act
        first = FieldError(message='is invalid', reason='invalid', field='amount')
        second = FieldError(message='is invalid', reason='invalid')

        # Assert
        assert first.field == 'amount'
        assert first.links == {}
        assert first.links is not second.links
