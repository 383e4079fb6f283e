"""
coevolution.core.exceptions - Custom Exception Hierarchy
==========================================================

This module defines a structured exception hierarchy for the simulator.
Components raise specific exception types that carry contextual information
instead of bare ValueError / RuntimeError.

Exception Hierarchy:
    CoEvolutionError (base)
        ├── ConfigurationError       - Invalid config, malformed YAML
        ├── InvalidVersionOperation  - Predecessor of an initial version
        ├── ArtifactError            - Builder misuse (missing payload, etc.)
        └── PropagationLimitError    - A cascade exceeded its configured bound

What is NOT an error:
    Looking up a version the repository has never seen. Relationship queries
    are total functions: unknown versions resolve to None or an empty set.

Payload Failures:
    Transformation and consumer payloads are caller-supplied code. The engine
    does not wrap or catch their exceptions; they propagate unchanged to the
    outer ``commit`` caller. There is no rollback, so artifacts committed
    earlier in the same cascade stay stored.

Usage:
    >>> from coevolution.core.exceptions import InvalidVersionOperation
    >>> raise InvalidVersionOperation(
    ...     message="Can't create previous version for initial version",
    ...     version="microservice@0",
    ... )
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
# All simulator exceptions inherit from this base class, so callers can
# catch every framework error with a single except clause:
#
#   try:
#       ecosystem.commit(artifact)
#   except CoEvolutionError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class CoEvolutionError(Exception):
    """Base exception for all simulator errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code, UPPER_SNAKE_CASE.
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
class ConfigurationError(CoEvolutionError):
    """Raised when the simulator configuration is invalid.

    Common Causes:
        - Malformed YAML in coevolution.yaml
        - A YAML document that is not a mapping
        - Out-of-range values (e.g. max_cascade_depth=0)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Invalid Version Operation
# =============================================================================
# There is no version before the initial one. Asking for it is a contract
# violation by the caller, not something the simulator recovers from.
# =============================================================================
class InvalidVersionOperation(CoEvolutionError):
    """Raised when ``predecessor()`` is requested for an initial version.

    Attributes:
        version: Rendered version the operation was attempted on.

    Example:
        >>> ArtifactVersion.initial("microservice").predecessor()
        Traceback (most recent call last):
        ...
        InvalidVersionOperation: Can't create previous version for initial version microservice@0
    """

    def __init__(
        self,
        message: str,
        version: str,
        error_code: str = "INVALID_VERSION_OPERATION",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["version"] = version

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.version = version


# =============================================================================
# Artifact Error
# =============================================================================
class ArtifactError(CoEvolutionError):
    """Raised when an artifact cannot be built from a builder's state.

    Common Causes:
        - Transformation builder without a transformation function
        - Consumer builder without a predicate
        - Co-evolution model builder without a changed artifact

    Attributes:
        artifact: Rendered version of the artifact being built.
    """

    def __init__(
        self,
        message: str,
        artifact: str,
        error_code: str = "ARTIFACT_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["artifact"] = artifact

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.artifact = artifact


# =============================================================================
# Propagation Limit Error
# =============================================================================
# The engine itself has no cycle breaker: a transformation whose output loops
# back to its own input re-triggers itself forever. The repository bounds
# every cascade (nesting depth and commit count) and raises this error when a
# bound is hit. Commits made before the bound stay stored.
# =============================================================================
class PropagationLimitError(CoEvolutionError):
    """Raised when a commit cascade exceeds its configured bound.

    Attributes:
        version: Rendered version of the artifact whose commit was refused.
        limit: Name of the bound that was hit
            ("max_cascade_depth" or "max_cascade_commits").

    Example:
        >>> raise PropagationLimitError(
        ...     message="Cascade depth 64 reached",
        ...     version="customerMicroservice@64",
        ...     limit="max_cascade_depth",
        ...     details={"depth": 64},
        ... )
    """

    def __init__(
        self,
        message: str,
        version: str,
        limit: str,
        error_code: str = "PROPAGATION_LIMIT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["version"] = version
        enriched_details["limit"] = limit

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.version = version
        self.limit = limit
