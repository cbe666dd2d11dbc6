"""Application-wide constants."""

# Version info
APP_NAME = "Deploy Hook"
APP_DESCRIPTION = "GitHub push webhook that deploys docs and purges the CDN"

# Server defaults
DEFAULT_PORT = 3000
DEFAULT_WEBHOOK_SECRET = "123"
DEFAULT_SCRIPT_PATH = "./run.sh"
DEFAULT_SHELL = "/bin/sh"
DEFAULT_DEPLOY_REF = "refs/heads/master"

# Webhook protocol
GITHUB_EVENT_HEADER = "X-GitHub-Event"
GITHUB_SIGNATURE_HEADER = "X-Hub-Signature"
SIGNATURE_PREFIX = "sha1="
PUSH_EVENT = "push"

# Script output prefixes
STDOUT_PREFIX = "--->"
STDERR_PREFIX = "!!->"

# CloudFront
INVALIDATION_PATHS = ["/*"]
AWS_CREDENTIAL_VARS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")

# Static sites
DEFAULT_PUBLIC_DIR = "./public"
DEFAULT_NOT_FOUND_PAGE = "./404.html"
DEFAULT_DOCS_URL = "docs.amethyst.rs"
DEFAULT_BOOK_URL = "book.amethyst.rs"
DEFAULT_TRIGGER_URL = "hook.amethyst.rs"
DOCS_ROOT = "/amethyst/"
BOOK_ROOT = "/"
SEMVER_PATTERN = r"^v(0|[0-9]+).(0|[0-9]+)(.(0|[0-9]+))?$"
HTML_EXTENSIONS = (".html", ".htm")
