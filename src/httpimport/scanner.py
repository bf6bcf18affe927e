"""Lexical extraction of module specifiers from declaration files.

This is a best-effort textual scan, not a parser. It recognises

    import X from '...'            export X from '...'
    import type { A, B } from '...'  export type { A } from '...'
    import * as ns from '...'      export * from '...'
    import X, { A } from '...'     export * as ns from '...'

Tolerance: specifiers inside comments or string/template literals that look
like the forms above are reported (false positives); side-effect imports
(``import './x'``), dynamic ``import('./x')`` type queries and triple-slash
references are not (false negatives). Declaration files are machine-generated
and stylistically narrow, so both are rare in practice.
"""

from __future__ import annotations

import re

_IDENT = r"[\w$]+"
_CLAUSE = rf"(?:\{{[^}}]*\}}|\*(?:\s+as\s+{_IDENT})?|{_IDENT})"

_REFERENCE_RE = re.compile(
    rf"""\b(?:import|export)\s+(?:type\s+)?{_CLAUSE}"""
    rf"""(?:\s*,\s*(?:\{{[^}}]*\}}|\*\s+as\s+{_IDENT}))?"""
    r"""\s*from\s*(['"])([^'"]+)\1"""
)


class RegexReferenceScanner:
    """Reference scanner implementing ReferenceScannerProtocol."""

    def scan(self, text: str) -> list[str]:
        """Return every ``from '...'`` specifier in ``text``, in source order."""
        return [match.group(2) for match in _REFERENCE_RE.finditer(text)]
