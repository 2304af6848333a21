"""
Central configuration for ignore rule processing
"""

# Ignore files discovered under each loaded root
IGNORE_FILENAME = ".gitignore"

# Baseline exclusions installed before anything else. These also stay in force
# when smart-filter mode bypasses ordinary rule evaluation.
BASELINE_EXCLUSIONS = [
    # Version control
    ".git/",
    ".svn/",
    ".hg/",

    # IDE and editor state
    ".vs/",
    ".vscode/",
    ".idea/",

    # Build-tool caches and dependency trees
    "node_modules/",
    "__pycache__/",
    "*.pyc",
    "*.cache",
    "bin/",
    "obj/",
    "dist/",
    "build/",

    # OS metadata
    ".DS_Store",
    "Thumbs.db",

    # Logs and temporary files
    "*.log",
    "*.tmp",
    "*.temp",

    # Lockfiles
    "*.lock",
    "package-lock.json",
    "yarn.lock",
]

# Extensions that smart-filter mode always includes, regardless of ordinary rules
SMART_FILTER_EXTENSIONS = frozenset({
    ".cs", ".csproj", ".sln", ".json", ".xml", ".config", ".yaml", ".yml",
    ".md", ".txt", ".sh", ".ps1", ".cmd", ".bat",
    ".js", ".ts", ".jsx", ".tsx", ".css", ".scss", ".html", ".vue",
    ".py", ".java", ".cpp", ".c", ".h", ".hpp", ".go", ".rs", ".rb",
})

# Path segments that mark compiler / build output (compared case-insensitively)
BUILD_OUTPUT_DIRECTORIES = frozenset({
    "bin", "obj", "build", "dist", "out", "debug", "release", "x64", "x86",
})

# Limits for security and performance
MAX_IGNORE_FILE_SIZE = 1024 * 1024  # 1MB
MAX_PATTERNS_PER_FILE = 10000
