"""Test that all Python modules can be imported without circular dependency errors."""


def test_imports():
    """Test importing all jobkit modules."""
    import jobkit
    import jobkit.base_types
    import jobkit.builder
    import jobkit.constants
    import jobkit.exception
    import jobkit.job_data_map
    import jobkit.scope
    import jobkit.serialised
    import jobkit.values
    import jobkit.utils.id_generator
    import jobkit.utils.logging_config

    assert jobkit.__version__
