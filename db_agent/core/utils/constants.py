"""Constants used throughout the application."""

# Directories never descended into when scanning the target project
DEFAULT_IGNORED_PROJECT_DIRS = frozenset(
    {
        ".git",
        ".next",
        ".turbo",
        "node_modules",
        "dist",
        "build",
        "coverage",
    }
)

# Dependency manifest and the framework it must declare
MANIFEST_FILE = "package.json"
FRAMEWORK_DEPENDENCY = "next"
REQUIRED_PROJECT_FILES = ("package.json", "src/app/page.tsx")

# Well-known project sources
SCHEMA_FILE = "src/db/schema.ts"
CONNECTION_FILE = "src/db/index.ts"
MAIN_PAGE_FILE = "src/app/page.tsx"
BUILD_CONFIG_FILE = "drizzle.config.ts"
MIGRATIONS_DIR = "drizzle"
API_ROUTES_DIR = "src/app/api"
COMPONENTS_DIR = "src/components"

DATABASE_DEPENDENCIES = (
    "drizzle-orm",
    "drizzle-kit",
    "@neondatabase/serverless",
    "postgres",
    "pg",
)

# Context bundle limits
DEFAULT_MAX_FILE_CHARS = 2_000
TRUNCATION_MARKER = "\n// ... (truncated for brevity)"

# Dry-run preview
DEFAULT_PREVIEW_CHARS = 500
PREVIEW_ELISION = "\n..."

# Backup naming convention
BACKUP_MARKER = ".backup-"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

# Environment variables surfaced by ``status``
API_KEY_ENV = "GEMINI_API_KEY"
DATABASE_URL_ENV = "DATABASE_URL"

RULE_WIDTH = 60
