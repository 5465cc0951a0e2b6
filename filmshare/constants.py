# filmshare/constants.py
# Short-code alphabet and the bounds applied to shared favorites payloads

import re

# 62 symbols, order matters: deployed mapping files were generated with it
SHORT_CODE_ALPHABET: str = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SHORT_CODE_LENGTH: int = 3
SHORT_CODE_CAPACITY: int = len(SHORT_CODE_ALPHABET) ** SHORT_CODE_LENGTH  # 238,328
SHORT_CODE_CHARSET_LABEL: str = "a-z, A-Z, 0-9 (62 chars)"

# Wire limits
MAX_PAYLOAD_LENGTH: int = 100_000
MAX_DECOMPRESSED_LENGTH: int = 500_000
MAX_SHARED_ITEMS: int = 10_000

# Film key validation on decode
FILM_KEY_MIN_LENGTH: int = 3
FILM_KEY_MAX_LENGTH: int = 200
FILM_KEY_PATTERN: re.Pattern = re.compile(r"^[a-zA-Z0-9_-]+$")
INJECTION_BLOCKLIST: tuple[str, ...] = ("script", "eval", "function")

# URI-safe compressor output plus the punctuation older links may carry
PAYLOAD_CHARSET_PATTERN: re.Pattern = re.compile(r"^[A-Za-z0-9+/=\-_*!~'()$]+$")
SUSPICIOUS_PAYLOAD_MARKERS: tuple[str, ...] = ("<script", "javascript:", "onerror=")

# Query parameters of /shared-favorites
SHARE_PATH: str = "/shared-favorites"
FAVS_PARAM: str = "favs"
NAME_PARAM: str = "name"

# Per-profile list stores
WATCHLIST: str = "watchlist"
WATCHED: str = "watched"
LIST_NAMES: tuple[str, ...] = (WATCHLIST, WATCHED)
PROFILE_PATTERN: re.Pattern = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")
