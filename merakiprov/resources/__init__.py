"""Resource implementations.

Importing this package triggers resource registration via @register_resource.
"""

import merakiprov.resources.appliance  # noqa: F401
import merakiprov.resources.devices  # noqa: F401
import merakiprov.resources.networks  # noqa: F401
import merakiprov.resources.organizations  # noqa: F401
import merakiprov.resources.switch  # noqa: F401
