"""Auto-correction of informal license strings into SPDX expressions."""

from __future__ import annotations

import re
from typing import Callable, Collection, Dict, List, Optional, Sequence, Tuple

from .expression import EXCEPTIONS, ExpressionError, ExpressionSyntaxError, is_license_ref, parse


class ExpressionCorrectionError(ExpressionError):
    """Raised when a license string cannot be mapped to SPDX identifiers."""


# npm conventions for "no license granted"; never correct these to a real license.
_UNCORRECTABLE_RE = re.compile(r"^(?:UNLICENSED|SEE LICEN[CS]E IN\b.*)$", re.IGNORECASE)

_ALIASES: Dict[str, str] = {
    "apache license version 2.0": "Apache-2.0",
    "apache software license": "Apache-2.0",
    "asl 2.0": "Apache-2.0",
    "bsd": "BSD-3-Clause",
    "bsd new": "BSD-3-Clause",
    "new bsd": "BSD-3-Clause",
    "modified bsd": "BSD-3-Clause",
    "revised bsd": "BSD-3-Clause",
    "simplified bsd": "BSD-2-Clause",
    "freebsd": "BSD-2-Clause-FreeBSD",
    "expat": "MIT",
    "mit/x11": "MIT",
    "x11 license": "X11",
    "boost": "BSL-1.0",
    "cc0": "CC0-1.0",
    "public domain (cc0)": "CC0-1.0",
    "zlib/libpng": "Zlib",
    "python software foundation license": "Python-2.0",
    "psf": "Python-2.0",
}

_LAST_RESORTS: Tuple[Tuple[str, str], ...] = (
    ("UNLI", "Unlicense"),
    ("WTF", "WTFPL"),
    ("2 CLAUSE", "BSD-2-Clause"),
    ("2-CLAUSE", "BSD-2-Clause"),
    ("3 CLAUSE", "BSD-3-Clause"),
    ("3-CLAUSE", "BSD-3-Clause"),
    ("AFFERO", "AGPL-3.0-or-later"),
    ("AGPL", "AGPL-3.0-or-later"),
    ("APACHE", "Apache-2.0"),
    ("ARTISTIC", "Artistic-2.0"),
    ("BEER", "Beerware"),
    ("BOOST", "BSL-1.0"),
    ("BSD", "BSD-3-Clause"),
    ("CDDL", "CDDL-1.1"),
    ("ECLIPSE", "EPL-1.0"),
    ("LESSER", "LGPL-3.0-or-later"),
    ("LGPL", "LGPL-3.0-or-later"),
    ("GPLV1", "GPL-1.0-only"),
    ("GPL-1", "GPL-1.0-only"),
    ("GPLV2", "GPL-2.0-only"),
    ("GPL-2", "GPL-2.0-only"),
    ("GPL", "GPL-3.0-or-later"),
    ("GNU", "GPL-3.0-or-later"),
    ("MIT +NO-FALSE-ATTRIBS", "MITNFA"),
    ("MIT", "MIT"),
    ("MPL", "MPL-2.0"),
    ("X11", "X11"),
    ("ZLIB", "Zlib"),
)

_VERSION_RE = re.compile(r"[\s-]*v(?:ersion)?\s*(\d+(?:\.\d+)*)$", re.IGNORECASE)
_BARE_VERSION_RE = re.compile(r"\s+(\d+(?:\.\d+)*)$")
_MAJOR_ONLY_RE = re.compile(r"-(\d+)$")
_LICENSE_SUFFIX_RE = re.compile(r"[\s-]+licen[cs]e$", re.IGNORECASE)
_THE_PREFIX_RE = re.compile(r"^the\s+", re.IGNORECASE)
# A single hyphenated token carrying a version, e.g. "LGPL-2.0" or "Foo-1.1+".
_SPDX_SHAPE_RE = re.compile(r"^[A-Za-z0-9.]+(?:-[A-Za-z0-9.]+)*-v?\d[A-Za-z0-9.]*\+?$")


def _drop_article(value: str) -> str:
    return _THE_PREFIX_RE.sub("", value)


def _drop_license_suffix(value: str) -> str:
    return _LICENSE_SUFFIX_RE.sub("", value)


def _dash_version(value: str) -> str:
    value = _VERSION_RE.sub(r"-\1", value)
    return _BARE_VERSION_RE.sub(r"-\1", value)


def _add_minor_version(value: str) -> str:
    return _MAJOR_ONLY_RE.sub(r"-\1.0", value)


def _spaces_to_dashes(value: str) -> str:
    return re.sub(r"\s+", "-", value)


_TRANSFORMS: Sequence[Callable[[str], str]] = (
    _drop_article,
    _drop_license_suffix,
    _dash_version,
    _add_minor_version,
    _spaces_to_dashes,
)


class Corrector:
    """Corrects license strings against a set of known identifiers."""

    def __init__(self, known: Collection[str]) -> None:
        self._known = known
        self._by_lower: Dict[str, str] = {identifier.lower(): identifier for identifier in known}
        self._exceptions_by_lower = {name.lower(): name for name in EXCEPTIONS}

    def correct(self, text: str) -> str:
        """Return a parseable expression for ``text`` or raise ExpressionCorrectionError."""
        collapsed = " ".join(str(text).split())
        if not collapsed or _UNCORRECTABLE_RE.match(collapsed):
            raise ExpressionCorrectionError(f"Cannot correct license string {text!r}")
        try:
            parse(collapsed, self._known)
        except ExpressionSyntaxError:
            pass
        else:
            return collapsed

        parts: List[str] = []
        expect_exception = False
        for kind, value in _split_phrases(collapsed):
            if kind == "phrase":
                if expect_exception:
                    parts.append(self._correct_exception(value))
                else:
                    parts.append(self.correct_identifier(value))
                expect_exception = False
            else:
                parts.append(value)
                expect_exception = value == "WITH"
        corrected = " ".join(parts).replace("( ", "(").replace(" )", ")")
        return corrected

    def correct_identifier(self, phrase: str) -> str:
        """Map one informal license name to a known identifier."""
        direct = self._match(phrase)
        if direct is not None:
            return direct
        if phrase.endswith("+") and len(phrase) > 1:
            base = self._match_transformed(phrase[:-1].rstrip())
            if base is not None:
                return f"{base}+"
        transformed = self._match_transformed(phrase)
        if transformed is not None:
            return transformed

        alias = _ALIASES.get(phrase.lower())
        if alias is not None and alias in self._known:
            return alias

        if _SPDX_SHAPE_RE.match(phrase):
            raise ExpressionCorrectionError(f"Unknown license identifier {phrase!r}")
        upper = phrase.upper()
        for needle, identifier in _LAST_RESORTS:
            if needle in upper and identifier in self._known:
                return identifier
        raise ExpressionCorrectionError(f"Cannot correct license identifier {phrase!r}")

    def _match(self, candidate: str) -> Optional[str]:
        if candidate in self._known or is_license_ref(candidate):
            return candidate
        return self._by_lower.get(candidate.lower())

    def _match_transformed(self, phrase: str) -> Optional[str]:
        candidates = [phrase]
        for transform in _TRANSFORMS:
            candidates.extend([transform(candidate) for candidate in candidates])
        for candidate in candidates:
            matched = self._match(candidate.strip())
            if matched is not None:
                return matched
            alias = _ALIASES.get(candidate.strip().lower())
            if alias is not None and alias in self._known:
                return alias
        return None

    def _correct_exception(self, phrase: str) -> str:
        candidate = self._exceptions_by_lower.get(_spaces_to_dashes(phrase).lower())
        if candidate is None:
            raise ExpressionCorrectionError(f"Unknown license exception {phrase!r}")
        return candidate


def _split_phrases(text: str) -> List[Tuple[str, str]]:
    """Split ``text`` into parens, upper-cased operators and license phrases."""
    pieces: List[Tuple[str, str]] = []
    words: List[str] = []

    def _flush() -> None:
        if words:
            pieces.append(("phrase", " ".join(words)))
            words.clear()

    for raw in re.split(r"([()])|\s+", text):
        if not raw:
            continue
        if raw in ("(", ")"):
            _flush()
            pieces.append(("paren", raw))
        elif raw.upper() in ("AND", "OR", "WITH"):
            _flush()
            pieces.append(("operator", raw.upper()))
        else:
            words.append(raw)
    _flush()
    return pieces


def correct(text: str, known: Collection[str]) -> str:
    """Correct ``text`` against ``known`` identifiers."""
    return Corrector(known).correct(text)


__all__ = ["Corrector", "ExpressionCorrectionError", "correct"]
