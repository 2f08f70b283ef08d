"""Constants for the Recipe Feeder extraction pipeline."""

# Environment variable names
ENV_AI_API_KEY = "GEMINI_API_KEY"
ENV_AI_MODEL = "GEMINI_MODEL"
ENV_SCRAPER_API_KEY = "SCRAPER_API_KEY"
ENV_CURL_PATH = "CURL_PATH"

# Default values
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TITLE = "Untitled Recipe"
DEFAULT_VIDEO_TITLE = "YouTube Recipe"
DEFAULT_CURL_PATH = "curl"

# Available models
AVAILABLE_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "gemini-2.5-pro",
]

# Timeouts (seconds)
DIRECT_FETCH_TIMEOUT = 10
CURL_FETCH_TIMEOUT = 15
CURL_PROCESS_TIMEOUT = 20
RENDER_PROXY_TIMEOUT = 30
ARCHIVE_INDEX_TIMEOUT = 8
ARCHIVE_SNAPSHOT_TIMEOUT = 15
OEMBED_TIMEOUT = 8
WATCH_PAGE_TIMEOUT = 10
TRANSCRIPT_TIMEOUT = 15
AI_REQUEST_TIMEOUT = 60

# Size limits
DEFAULT_MAX_RESPONSE_SIZE = 5 * 1024 * 1024
DEFAULT_MAX_REDIRECTS = 10
MAX_DOCUMENT_SIZE = 20 * 1024 * 1024
MAX_VIDEO_TEXT_LENGTH = 15000
MIN_VIDEO_TEXT_LENGTH = 50
MAX_AI_OUTPUT_TOKENS = 4096
MAX_HTML_INGREDIENTS = 50
MAX_HTML_INSTRUCTIONS = 30
MAX_CAPTION_TITLE_LENGTH = 80

# Endpoints
RENDER_PROXY_URL = "https://api.scraperapi.com/"
ARCHIVE_INDEX_URL = "https://web.archive.org/cdx/search/cdx"
ARCHIVE_SNAPSHOT_URL = "https://web.archive.org/web/{timestamp}id_/{url}"
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
SEARCH_REFERER = "https://www.google.com/"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

# Source hosts
YOUTUBE_HOSTS = frozenset({
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "youtu.be",
})
SOCIAL_CAPTION_HOSTS = frozenset({
    "instagram.com",
    "tiktok.com",
    "facebook.com",
})

# Uploaded document types
DOCUMENT_TYPES = {
    "application/pdf": "pdf",
    "image/jpeg": "image",
    "image/png": "image",
    "image/webp": "image",
    "image/gif": "image",
}

# Source labels for non-URL inputs
SOURCE_UPLOADED_DOCUMENT = "uploaded-document"
SOURCE_PASTED_TEXT = "pasted-text"

# Batch retry
BATCH_MAX_RETRIES = 2
BATCH_BACKOFF_SECONDS = 5
RETRYABLE_ERROR_MARKERS = (
    "overload",
    "529",
    "rate",
    "timeout",
    "timed out",
    "connection",
)
