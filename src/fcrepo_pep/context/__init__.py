"""Request shaping for policy evaluation.

This package turns the facts of an intercepted operation into the
normalized request the decision engine consumes:

- context/ (this package): Builds Requests from subject, action, resources
- pdp/: Decision engines and the decision combiner
- pep/: Engine lifecycle and enforcement

Structure:
    attributes.py       - Attribute, AttributeSet, Request models
    wrappers.py         - wrap_subject / wrap_action / wrap_resource
    resource.py         - ResourceRef (resource id + namespace)
    request_context.py  - RequestContext protocol + StaticRequestContext
"""

from fcrepo_pep.context.attributes import Attribute, AttributeSet, Request
from fcrepo_pep.context.request_context import RequestContext, StaticRequestContext
from fcrepo_pep.context.resource import ResourceRef
from fcrepo_pep.context.wrappers import wrap_action, wrap_resource, wrap_subject

__all__ = [
    # Models
    "Attribute",
    "AttributeSet",
    "Request",
    "ResourceRef",
    # Wrappers
    "wrap_action",
    "wrap_resource",
    "wrap_subject",
    # Request context
    "RequestContext",
    "StaticRequestContext",
]
