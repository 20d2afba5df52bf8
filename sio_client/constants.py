# =============================================================================
# SIO Client -- Protocol Constants
# =============================================================================
#
# Values match the Engine.IO v2/v3 and Socket.IO v1/v2 wire protocols and
# RFC 6455 base framing.
# =============================================================================

# -- Engine.IO defaults --------------------------------------------------------

DEFAULT_EIO_VERSION = 3
DEFAULT_TRANSPORT = "polling"
TRANSPORT_POLLING = "polling"
TRANSPORT_WEBSOCKET = "websocket"

# -- URL defaults --------------------------------------------------------------

DEFAULT_SCHEME = "http"
DEFAULT_HOST = "localhost"
DEFAULT_PATH = "socket.io"
DEFAULT_HTTP_PORT = 80
DEFAULT_HTTPS_PORT = 443

# -- Timing (seconds) --------------------------------------------------------

DEFAULT_TIMEOUT = 60.0
DEFAULT_WAIT = 0.0
HEARTBEAT_MARGIN = 5.0  # ping fires this early to land inside pingTimeout

# -- WebSocket upgrade ---------------------------------------------------------

WS_VERSION = "13"
UPGRADE_STATUS = b"HTTP/1.1 101"
DEFAULT_ORIGIN = "*"
KEY_ENTROPY_BYTES = 32
KEY_DIGEST_BYTES = 16  # EIO > 2 truncates the SHA-1 digest to 16 bytes

# -- Frame layout --------------------------------------------------------------

MIN_FRAME_SIZE = 3
MAX_INLINE_LENGTH = 125
MAX_SHORT_LENGTH = 0xFFFF
LENGTH_16BIT = 126
LENGTH_64BIT = 127
MASK_KEY_SIZE = 4

# -- Stream --------------------------------------------------------------------

RECV_CHUNK_SIZE = 65_536
