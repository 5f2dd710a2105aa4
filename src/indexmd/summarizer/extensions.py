"""
Source file extensions the content summarizer accepts.

Markdown is deliberately absent: index documents are markdown files and
must never be summarized as sources of their own directory.
"""

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({
    # Python
    ".py", ".pyi",
    # JavaScript / TypeScript
    ".js", ".mjs", ".cjs", ".jsx",
    ".ts", ".tsx",
    # Rust / Go
    ".rs", ".go",
    # JVM
    ".java", ".kt", ".scala",
    # Ruby / PHP / Swift
    ".rb", ".php", ".swift",
    # C / C++ / C#
    ".c", ".h", ".cpp", ".cc", ".cxx", ".hpp", ".cs",
    # Web
    ".html", ".css", ".scss", ".vue", ".svelte",
    # Shell
    ".sh", ".bash", ".zsh",
    # DB
    ".sql",
})
