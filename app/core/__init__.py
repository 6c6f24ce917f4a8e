"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks with no payment or order logic:

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)
    - AppSetting: Key/value runtime configuration

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - VersionedMixin: Version counter bumped on every save
    - MetadataMixin: Flexible JSON metadata storage

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Result wrapper for best-effort operations

Exceptions (import from core.exceptions):
    - BaseApplicationError and its ValidationError, NotFoundError,
      ConflictError and ConfigurationError subclasses

Configuration (import from core.configuration):
    - ConfigurationProvider: AppSetting lookups with defaults

API (core.exception_handler):
    - application_exception_handler: DRF handler for BaseApplicationError
"""
