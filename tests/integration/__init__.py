"""Integration tests for the restarter.

These tests talk to a real cluster and require a kubeconfig. They only read
state; nothing is restarted.

Tests are marked with @pytest.mark.integration and can be run with:
    pytest tests/integration/ -m integration
"""
