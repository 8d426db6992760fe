# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - catalog.py: Product catalog (valid products, folder segments, owners)
# - models/: Pydantic schemas for requests and results
# - services/: Folder provisioning and automation orchestration
#
# Code in this package does not deal with requests or responses.
# This keeps the logic testable and reusable.
# =============================================================================
