def test_package_imports():
    """Verify all notifier subpackages can be imported without errors."""
    import themis_notifier
    import themis_notifier.actions
    import themis_notifier.cli
    import themis_notifier.core
    import themis_notifier.reporting
    import themis_notifier.service

    assert themis_notifier.__version__
