"""Application-wide constants for fcrepo-pep.

Attribute identifiers used to build authorization requests, and defaults
for engine and logging behavior. For user-configurable settings see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "AUDIT_LOG_FILENAME",
    # Attribute identifiers
    "STRING_TYPE_URI",
    "XACML_SUBJECT_ID_URI",
    "XACML_ACTION_ID_URI",
    "XACML_RESOURCE_ID_URI",
    "SUBJECT_LOGIN_ID_URI",
    "ACTION_ID_URI",
    "ACTION_API_URI",
    "ACTION_CONTEXT_URI",
    "RESOURCE_ID_URI",
    "RESOURCE_NAMESPACE_URI",
    # Request context stand-in
    "DEFAULT_SUBJECT_LOGIN_ID",
    # Engine defaults
    "MIN_ENGINE_TIMEOUT_SECONDS",
    "MAX_ENGINE_TIMEOUT_SECONDS",
]

APP_NAME = "fcrepo-pep"

AUDIT_LOG_FILENAME = "enforcement.jsonl"

# =============================================================================
# Attribute identifiers
# =============================================================================

STRING_TYPE_URI = "http://www.w3.org/2001/XMLSchema#string"

# XACML 1.0 default markers. Always present (with empty value) so policies
# can target "any subject/action/resource".
XACML_SUBJECT_ID_URI = "urn:oasis:names:tc:xacml:1.0:subject:subject-id"
XACML_ACTION_ID_URI = "urn:oasis:names:tc:xacml:1.0:action:action-id"
XACML_RESOURCE_ID_URI = "urn:oasis:names:tc:xacml:1.0:resource:resource-id"

# Repository-specific attributes
SUBJECT_LOGIN_ID_URI = "urn:fedora:names:fedora:2.1:subject:loginId"
ACTION_ID_URI = "urn:fedora:names:fedora:2.1:action:id"
ACTION_API_URI = "urn:fedora:names:fedora:2.1:action:api"
ACTION_CONTEXT_URI = "urn:fedora:names:fedora:2.1:action:contextId"
RESOURCE_ID_URI = "urn:fedora:names:fedora:2.1:resource:object:pid"
RESOURCE_NAMESPACE_URI = "urn:fedora:names:fedora:2.1:resource:object:namespace"

# Identity reported by the static request context
DEFAULT_SUBJECT_LOGIN_ID = "fedoraAdmin"

# Engine evaluation timeout bounds (seconds)
MIN_ENGINE_TIMEOUT_SECONDS = 0.001
MAX_ENGINE_TIMEOUT_SECONDS = 300.0
