# =============================================================================
# SIO Client -- Package Logger
# =============================================================================

import logging

logger = logging.getLogger("sio_client")
