"""Configuration constants.

Centralizes magic numbers and default values shared by the chat stores,
the session controller and the CLI.
"""

# Title derivation
TITLE_MAX_LENGTH = 30  # Characters kept from the first message
TITLE_ELLIPSIS = "..."
DEFAULT_CHAT_TITLE = "New Chat"

# Assistant
FALLBACK_REPLY = "Sorry, something went wrong. Please try again."
DEFAULT_REPLY_TIMEOUT = 60.0  # Seconds before an assistant call is abandoned

# Endpoints
DEFAULT_API_URL = "http://127.0.0.1:8000"
DEFAULT_ASK_URL = f"{DEFAULT_API_URL}/ask"
DEFAULT_HTTP_TIMEOUT = 30.0  # Seconds per chat store request

# Device storage keys
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
CHATS_KEY_PREFIX = "chats_"
NAMESPACE_PREFIX = "user_"

# Store backends
STORE_LOCAL = "local"
STORE_REMOTE = "remote"

# Assistant backends
ASSISTANT_HTTP = "http"
ASSISTANT_OPENAI = "openai"
