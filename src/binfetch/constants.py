"""Release API specifications and download constants."""

from binfetch import __version__

# GitHub API URL structure
GITHUB_API_BASE = "https://api.github.com"
GITHUB_REPOS_PATH = "repos"
RELEASES_PATH = "releases"
TAGS_PATH = "tags"
LATEST_PATH = "latest"

API_URL_ENV = "BINFETCH_API_URL"
GITHUB_ACCEPT = "application/vnd.github+json"
USER_AGENT = f"binfetch/{__version__}"

DEFAULT_MEMORY_LIMIT = 100 * 1024 * 1024  # 100 MiB
CHUNK_SIZE = 8192
EXECUTABLE_MODE = 0o755

# Asset bodies may take arbitrarily long; only stalled sockets time out
DOWNLOAD_CONNECT_TIMEOUT = 30
DOWNLOAD_READ_TIMEOUT = 300
