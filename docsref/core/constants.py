"""
Core constants for the docsref system
"""

# Extensions indexed when no allowlist is configured
DEFAULT_EXTENSIONS = (
    # Document formats
    ".md", ".mdx", ".txt", ".rst", ".asciidoc", ".org",
    # Data/Config formats
    ".json", ".yaml", ".yml", ".toml", ".ini", ".cfg", ".conf", ".xml", ".csv",
    # Programming languages
    ".py", ".js", ".jsx", ".ts", ".tsx", ".java", ".cpp", ".c", ".h", ".hpp",
    ".cs", ".go", ".rs", ".rb", ".php", ".swift", ".kt", ".scala", ".r", ".m",
    # Scripts/Shell
    ".sh", ".bash", ".zsh", ".fish", ".ps1", ".bat", ".cmd",
    # Web
    ".html", ".htm", ".css", ".scss", ".sass", ".less", ".vue", ".svelte", ".astro",
    # Config/Build
    ".dockerfile", ".dockerignore", ".gitignore", ".env", ".env.example",
    ".editorconfig", ".prettierrc", ".eslintrc", ".babelrc",
    # Others
    ".sql", ".graphql", ".proto", ".ipynb",
)

# Layout under the base directory
DOCS_DIRNAME = "docs"
METADATA_FILENAME = "docs_metadata.json"

# Pagination and load limits
DEFAULT_MAX_CHARS_PER_PAGE = 10000
DEFAULT_LARGE_FILE_THRESHOLD = 15000
DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1MB
DEFAULT_QUERY_TIMEOUT = 30.0  # seconds

# Binary detection
BINARY_CHECK_BYTES = 8000
BINARY_HIGH_BYTE_RATIO = 0.3

# Query defaults
DEFAULT_MAX_RESULTS = 100
DEFAULT_TREE_DEPTH = 3
GREP_MAX_MATCHES = 100
PREVIEW_MAX_CHARS = 120
SUMMARY_FOLDER_EXTENSIONS = 5
SUMMARY_TOP_EXTENSIONS = 10

# Text rendering
ERROR_PREFIX = "Error:"
NO_DOCUMENTS_MESSAGE = "No documents found matching the criteria."
NO_MATCHES_MESSAGE = "No matches found"
PAGE_RULE = "─" * 60
