import os

SECRET_KEY = os.environ.get("FORUM_SECRET_KEY", "your-secret-key-change-this")
ALLOWED_ORIGINS = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"]
ALLOWED_HOSTS = os.environ.get("FORUM_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24

# Server Configuration
DEFAULT_HOST = os.environ.get("FORUM_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.environ.get("FORUM_PORT", "8000"))
LOG_LEVEL = os.environ.get("FORUM_LOG_LEVEL", "INFO")

# Storage
STORE_BACKEND = os.environ.get("FORUM_STORE_BACKEND", "file")  # file, sqlite, memory
STORE_PATH = os.environ.get("FORUM_STORE_PATH", "forum_data")
USERS_KEY = "zhiyun_users"
POSTS_KEY = "zhiyun_posts"
CURRENT_USER_KEY = "zhiyun_current_user"

# Seed accounts
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = os.environ.get("FORUM_ADMIN_PASSWORD", "admin123")
DEFAULT_USERNAME = "user"
DEFAULT_USER_PASSWORD = os.environ.get("FORUM_USER_PASSWORD", "user123")
BCRYPT_ROUNDS = int(os.environ.get("FORUM_BCRYPT_ROUNDS", "12"))

# Validation Constants
USERNAME_MIN_LENGTH = 1
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 1
POST_TITLE_MIN_LENGTH = 1
POST_TITLE_MAX_LENGTH = 200
POST_CONTENT_MIN_LENGTH = 1
POST_CONTENT_MAX_LENGTH = 50000
COMMENT_CONTENT_MAX_LENGTH = 10000

CATEGORIES = ["Announcements", "Embedded", "Backend", "Linux", "AI", "Other"]
AVATAR_COLORS = [
    "bg-red-500", "bg-orange-500", "bg-amber-500", "bg-green-500",
    "bg-teal-500", "bg-blue-500", "bg-indigo-500", "bg-purple-500", "bg-pink-500",
]

# Search weights
SEARCH_WEIGHT_TITLE = 10
SEARCH_WEIGHT_CONTENT = 5
SEARCH_WEIGHT_AUTHOR = 3
SEARCH_WEIGHT_CATEGORY = 2
SEARCH_WEIGHT_USER = 8
SEARCH_SNIPPET_LENGTH = 100

# AI Assist
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
AI_MODEL = os.environ.get("FORUM_AI_MODEL", "gemini-2.5-flash")
AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
AI_TIMEOUT_SECONDS = 30.0
AI_REPLY_MAX_WORDS = 100

# Security Settings
MAX_REQUEST_SIZE_MB = 1
GZIP_MIN_SIZE = 1000

# HTTP Status Codes
HTTP_REQUEST_ENTITY_TOO_LARGE = 413
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_INTERNAL_SERVER_ERROR = 500
