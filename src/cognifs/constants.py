"""Static vocabularies shared across cognifs.

These are defaults only. Every set here is copied into `CognifsConfig` and the
components read them from the config value they are constructed with.
"""

# Version control directories. A directory that contains one of these is the
# root of a foreign repository.
VCS_MARKERS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".bzr",
        ".fossil",
        "CVS",
    }
)

# Directories that protect themselves and everything beneath them
PROTECTED_DIR_MARKERS = frozenset(
    {
        # vcs internals
        *VCS_MARKERS,
        # build artifacts and dependencies
        "node_modules",
        "target",
        "dist",
        "build",
        ".gradle",
        ".mvn",
        # python environments and caches
        "venv",
        ".venv",
        "env",
        ".env",
        "__pycache__",
        ".pytest_cache",
        ".tox",
        ".mypy_cache",
        ".ruff_cache",
    }
)

# Application bundles are directories on disk but behave like single files
BUNDLE_SUFFIXES = (
    ".app",
    ".framework",
    ".plugin",
    ".bundle",
    ".kext",
    ".xcarchive",
    ".dSYM",
    ".xcodeproj",
    ".xcworkspace",
)

# Bundles that make their parent directory a project root
PROJECT_BUNDLE_SUFFIXES = (".xcodeproj", ".xcworkspace")

# Installer packages; never unpacked or reorganized, whether file or bundle
INSTALLER_SUFFIXES = (".pkg", ".deb", ".rpm")

# Files that mark their directory as a project root
PROJECT_MANIFESTS = frozenset(
    {
        "package.json",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "Cargo.toml",
        "Cargo.lock",
        "go.mod",
        "go.sum",
        "requirements.txt",
        "setup.py",
        "pyproject.toml",
        "pom.xml",
        "build.gradle",
        "composer.json",
        "Gemfile",
        "docker-compose.yml",
        "Dockerfile",
        ".gitignore",
        ".gitattributes",
    }
)

# OS litter that is never indexed or moved
IGNORED_NAMES = frozenset({".DS_Store", "Thumbs.db", "desktop.ini"})

EXTENSION_CATEGORIES = {
    "document": {"pdf", "doc", "docx", "odt", "rtf"},
    "image": {"jpg", "jpeg", "png", "gif", "webp", "heic", "bmp", "tiff", "svg"},
    "video": {"mp4", "avi", "mov", "mkv", "webm"},
    "audio": {"mp3", "wav", "flac", "m4a", "ogg"},
    "archive": {"zip", "tar", "gz", "rar", "7z", "bz2", "xz"},
    "spreadsheet": {"xls", "xlsx", "csv", "ods", "tsv"},
    "code": {"py", "rs", "js", "ts", "go", "java", "c", "cpp", "h", "rb", "sh"},
}

# Extensions whose bytes are worth handing to a tagger as text
TEXT_EXTENSIONS = frozenset(
    {
        "txt",
        "md",
        "markdown",
        "rst",
        "csv",
        "tsv",
        "json",
        "yaml",
        "yml",
        "toml",
        "ini",
        "log",
        "html",
        "xml",
        "py",
        "rs",
        "js",
        "ts",
        "go",
        "java",
        "sh",
    }
)

# Content keyword -> tag
KEYWORD_TAGS = {
    "todo": "task",
    "meeting": "meeting",
    "agenda": "meeting",
    "minutes": "meeting",
    "notes": "notes",
    "readme": "documentation",
    "tutorial": "documentation",
    "guide": "documentation",
    "code": "programming",
    "function": "programming",
    "bug": "issue",
    "feature": "enhancement",
    "test": "testing",
    "api": "integration",
    "config": "configuration",
    "invoice": "invoices",
    "receipt": "receipts",
    "statement": "financial",
    "payment": "financial",
    "tax": "financial",
    "report": "reporting",
    "contract": "legal",
    "draft": "draft",
    "recipe": "recipes",
    "resume": "career",
}

# Directory names that say nothing about their contents
COMMON_DIRECTORY_NAMES = frozenset(
    {
        "documents",
        "downloads",
        "desktop",
        "pictures",
        "music",
        "videos",
        "home",
        "user",
        "users",
        "tmp",
        "temp",
        "cache",
        "data",
        "files",
        "folder",
        "folders",
        "file",
        "dir",
        "directory",
        "src",
        "lib",
        "code",
        "projects",
    }
)
