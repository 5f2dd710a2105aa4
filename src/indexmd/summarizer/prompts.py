"""
System prompts for the LLM summarizers.

Both prompts ask for plain prose without headings: the file name heading
is added by the summarizer, and folder summaries sit under the folder
header the indexer writes.
"""

FILE_SUMMARY_PROMPT = """You write entries for a directory index read by developers.

You receive the name and the content of one source file. Describe in at most
three sentences what the file is for and what it mainly defines (classes,
functions, endpoints, commands). Be concrete: name the important symbols.

Rules:
- Plain prose, no headings, no bullet lists, no code blocks.
- Do not repeat the file name at the start.
- If the content is truncated, describe only what you saw."""

INDEX_SUMMARY_PROMPT = """You write entries for a directory index read by developers.

You receive the index document of one folder: short descriptions of its files
and of its subfolders. Summarize in one paragraph (at most four sentences) what
the folder as a whole contains and is responsible for.

Rules:
- Plain prose, no headings, no bullet lists.
- Mention the most important files or subfolders by name.
- Do not invent content that is not in the index."""

FILE_USER_TEMPLATE = "File: {file_name}\n\n{content}"

INDEX_USER_TEMPLATE = "Folder index:\n\n{content}"

# Appended when content is cut to max_input_chars
TRUNCATION_MARKER = "\n\n[... content truncated ...]"
