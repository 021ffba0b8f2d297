"""Data source implementations.

Importing this package triggers data-source registration via @register_data_source.
"""

import merakiprov.datasources.administered  # noqa: F401
import merakiprov.datasources.devices  # noqa: F401
import merakiprov.datasources.networks  # noqa: F401
import merakiprov.datasources.organizations  # noqa: F401
