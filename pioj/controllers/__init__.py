"""
Request controllers.

Controllers receive request parameters and the service handles they need,
and return response data, a status code and headers. Failures are raised as
the error kinds in :mod:`pioj.services.exceptions`; the application maps
those to HTTP responses.
"""

from typing import Tuple

ResponseData = Tuple[dict, int, dict]
