# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Monday folder automation:
# - test_config.py: Settings loading and the product catalog
# - test_exceptions.py: Error kinds and their HTTP mapping
# - test_monday_client.py: Board queries against a fake GraphQL endpoint
# - test_provisioner.py: Folder creation and template copy on tmp_path
# - test_automation_service.py: Orchestration with fake collaborators
# - test_api.py: HTTP endpoints end to end
#
# Run tests with: pytest
# =============================================================================
