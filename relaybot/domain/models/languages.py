"""
Static language tag -> file extension table used to name oversized code attachments.
"""

from __future__ import annotations
import re
from typing import Dict


LANGUAGE_EXTENSIONS: Dict[str, str] = {
    "python": "py",
    "py": "py",
    "javascript": "js",
    "js": "js",
    "jsx": "jsx",
    "typescript": "ts",
    "ts": "ts",
    "tsx": "tsx",
    "java": "java",
    "kotlin": "kt",
    "scala": "scala",
    "c": "c",
    "cpp": "cpp",
    "c++": "cpp",
    "csharp": "cs",
    "cs": "cs",
    "c#": "cs",
    "go": "go",
    "golang": "go",
    "rust": "rs",
    "ruby": "rb",
    "php": "php",
    "swift": "swift",
    "objectivec": "m",
    "lua": "lua",
    "perl": "pl",
    "r": "r",
    "dart": "dart",
    "haskell": "hs",
    "elixir": "ex",
    "erlang": "erl",
    "clojure": "clj",
    "shell": "sh",
    "sh": "sh",
    "bash": "sh",
    "zsh": "sh",
    "powershell": "ps1",
    "ps1": "ps1",
    "batch": "bat",
    "sql": "sql",
    "html": "html",
    "xml": "xml",
    "css": "css",
    "scss": "scss",
    "json": "json",
    "yaml": "yml",
    "yml": "yml",
    "toml": "toml",
    "ini": "ini",
    "markdown": "md",
    "md": "md",
    "dockerfile": "dockerfile",
    "makefile": "mk",
    "diff": "diff",
    "latex": "tex",
    "tex": "tex",
    "text": "txt",
    "plaintext": "txt",
    "txt": "txt",
}

_UNSAFE_EXTENSION_CHARS = re.compile(r"[^a-z0-9+#-]")


def extension_for(language: str) -> str:
    """Resolve an extension for a fence language tag, falling back to the tag, then ``txt``.

    Unknown tags are reduced to ``[a-z0-9+#-]`` before they become part of a filename.
    """
    tag = (language or "").strip().lower()
    if tag in LANGUAGE_EXTENSIONS:
        return LANGUAGE_EXTENSIONS[tag]
    return _UNSAFE_EXTENSION_CHARS.sub("", tag) or "txt"
