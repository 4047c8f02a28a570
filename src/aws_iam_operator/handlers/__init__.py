"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import policy  # noqa: F401
from . import policy_attachment  # noqa: F401
from . import role  # noqa: F401
from . import user  # noqa: F401
