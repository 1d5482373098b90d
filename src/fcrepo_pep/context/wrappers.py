"""Attribute wrappers - package request facts into AttributeSets.

Each wrapper is a pure function: no state, no engine access. The only side
effect is DEBUG logging of every constructed attribute (id, type, value).

Every set starts with an XACML default marker whose value is empty, so
policies can target "any subject/action/resource" without the wrappers
knowing which policies exist. Emptiness, not absence, means "don't care":
action and resource attributes are always emitted, even with empty values.
"""

from __future__ import annotations

__all__ = [
    "wrap_action",
    "wrap_resource",
    "wrap_subject",
]

from fcrepo_pep.constants import (
    ACTION_API_URI,
    ACTION_CONTEXT_URI,
    ACTION_ID_URI,
    RESOURCE_ID_URI,
    RESOURCE_NAMESPACE_URI,
    SUBJECT_LOGIN_ID_URI,
    XACML_ACTION_ID_URI,
    XACML_RESOURCE_ID_URI,
    XACML_SUBJECT_ID_URI,
)
from fcrepo_pep.context.attributes import Attribute, AttributeSet
from fcrepo_pep.exceptions import AuthorizationOperationalError
from fcrepo_pep.telemetry.system import get_system_logger
from fcrepo_pep.utils.logging.logging_helpers import sanitize_for_logging

_system_logger = get_system_logger()


def _attribute(wrapper: str, attribute_id: str, value: str) -> Attribute:
    attribute = Attribute(attribute_id=attribute_id, value=value)
    _system_logger.debug(
        {
            "event": "attribute_wrapped",
            "message": f"{wrapper}(): id={attribute.attribute_id}, type={attribute.data_type}, "
            f"value={sanitize_for_logging(attribute.value)}",
            "wrapper": wrapper,
            "attribute_id": attribute.attribute_id,
            "data_type": attribute.data_type,
            "value": sanitize_for_logging(attribute.value),
        }
    )
    return attribute


def _require_string(wrapper: str, name: str, value: object) -> str:
    if value is None:
        raise AuthorizationOperationalError(f"{wrapper}: required attribute '{name}' is missing")
    if not isinstance(value, str):
        raise AuthorizationOperationalError(
            f"{wrapper}: attribute '{name}' must be a string, got {type(value).__name__}"
        )
    return value


def wrap_subject(login_id: str | None) -> AttributeSet:
    """Build the subject attribute set.

    Always contains the anonymous marker. The login-id attribute is added
    only for a non-empty login id, so an anonymous caller yields exactly
    one attribute and an identified caller exactly two.

    Args:
        login_id: Caller's login id; None or "" means anonymous.

    Returns:
        AttributeSet for the subject.

    Raises:
        AuthorizationOperationalError: If login_id is not a string.
    """
    attributes = [_attribute("wrap_subject", XACML_SUBJECT_ID_URI, "")]
    if login_id is not None:
        login_id = _require_string("wrap_subject", "login_id", login_id)
        if login_id:
            attributes.append(_attribute("wrap_subject", SUBJECT_LOGIN_ID_URI, login_id))
    return AttributeSet(attributes=tuple(attributes))


def wrap_action(action_id: str, action_api: str, context_index: str) -> AttributeSet:
    """Build the action attribute set: marker, action id, api, context index.

    All four attributes are emitted even when values are empty strings.

    Raises:
        AuthorizationOperationalError: If any input is None or not a string.
    """
    action_id = _require_string("wrap_action", "action_id", action_id)
    action_api = _require_string("wrap_action", "action_api", action_api)
    context_index = _require_string("wrap_action", "context_index", context_index)
    return AttributeSet(
        attributes=(
            _attribute("wrap_action", XACML_ACTION_ID_URI, ""),
            _attribute("wrap_action", ACTION_ID_URI, action_id),
            _attribute("wrap_action", ACTION_API_URI, action_api),
            _attribute("wrap_action", ACTION_CONTEXT_URI, context_index),
        )
    )


def wrap_resource(resource_id: str, namespace: str) -> AttributeSet:
    """Build the resource attribute set: marker, resource id, namespace.

    An empty resource id is the valid "unscoped" sentinel; an empty
    namespace is also valid. Missing (None) or non-string input means the
    resource cannot be identified.

    Raises:
        AuthorizationOperationalError: If the resource cannot be identified.
    """
    resource_id = _require_string("wrap_resource", "resource_id", resource_id)
    namespace = _require_string("wrap_resource", "namespace", namespace)
    return AttributeSet(
        attributes=(
            _attribute("wrap_resource", XACML_RESOURCE_ID_URI, ""),
            _attribute("wrap_resource", RESOURCE_ID_URI, resource_id),
            _attribute("wrap_resource", RESOURCE_NAMESPACE_URI, namespace),
        )
    )
