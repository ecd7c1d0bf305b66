from __future__ import annotations

from typing import FrozenSet

BUILTIN_SCOPES: FrozenSet[str] = frozenset(
    {
        "form",
        "cgi",
        "session",
        "application",
        "variables",
        "request",
        "cookie",
        "url",
        "this",
        "arguments",
    }
)

# Namespaced access ("CGI.x") is matched against these exact spellings.
RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        # language keywords
        "public", "private", "package", "remote", "return", "function", "component", "property",
        "interface", "import", "abstract", "final", "required", "default",
        "if", "else", "for", "while", "do", "switch", "case", "break", "continue", "in",
        "try", "catch", "finally", "throw", "rethrow", "transaction", "new", "include", "abort",
        "var", "local", "super", "pageencoding", "cfimport",
        # types
        "numeric", "string", "boolean", "void",
        # operators
        "neq", "eq", "is", "not", "and", "or", "gt", "lt", "gte", "lte", "mod", "contains",
        "AND", "OR",
        # literals
        "true", "false", "null",
        # scopes
        "form", "session", "application", "request", "cookie", "url", "this", "arguments",
        "variables", "CGI", "cgi",
        # built-in functions and tag results
        "parameterexists", "preservesinglequotes", "quotedvaluelist", "valuelist", "now", "hash",
        "httpResult", "cfhttp", "cfhttpparam", "cfquery", "cfqueryparam",
        # tag names
        "cfscript", "cfoutput", "cfset", "cfif", "cfelseif", "cfelse", "cfreturn", "cfbreak",
        "cfcontinue", "cffunction", "cfargument", "cfcomponent", "cfproperty",
    }
)

_RESERVED_LOWER: FrozenSet[str] = frozenset(word.lower() for word in RESERVED_WORDS)


def is_builtin_scope(word: str) -> bool:
    return word.lower() in BUILTIN_SCOPES


def is_reserved(token: str) -> bool:
    """True for a reserved word (any case) or a `<reserved>.` namespaced access (exact case)."""
    if token.lower() in _RESERVED_LOWER:
        return True
    return any(token.startswith(word + ".") for word in RESERVED_WORDS)
