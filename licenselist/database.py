"""SPDX license database lookups."""

from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional

from .errors import FileSystemError
from .logging import get_logger

_BUNDLED_PACKAGE = "licenselist.data"
_BUNDLED_FILENAME = "licenses.json"

# Canonical URLs for well-known licenses; these take precedence over the
# SPDX reference page when present.
LICENSE_URLS: Dict[str, str] = {
    "Apache-2.0": "http://www.apache.org/licenses/LICENSE-2.0",
    "Artistic-2.0": "http://www.perlfoundation.org/artistic_license_2_0",
    "BSL-1.0": "http://www.boost.org/LICENSE_1_0.txt",
    "BSD-3-Clause": "http://opensource.org/licenses/BSD-3-Clause",
    "CPAL-1.0": "http://opensource.org/licenses/cpal_1.0",
    "CC0-1.0": "http://creativecommons.org/publicdomain/zero/1.0/legalcode",
    "EPL-1.0": "http://www.eclipse.org/legal/epl-v10.html",
    "MIT": "http://www.jclark.com/xml/copying.txt",
    "BSD-2-Clause-FreeBSD": "http://www.freebsd.org/copyright/freebsd-license.html",
    "GPL-2.0-only": "http://www.gnu.org/licenses/gpl-2.0.html",
    "GPL-2.0-or-later": "http://www.gnu.org/licenses/gpl-2.0.html",
    "GPL-2.0+": "http://www.gnu.org/licenses/gpl-2.0.html",
    "GPL-2.0": "http://www.gnu.org/licenses/gpl-2.0.html",
    "GPL-3.0-only": "http://www.gnu.org/licenses/gpl-3.0.html",
    "GPL-3.0-or-later": "http://www.gnu.org/licenses/gpl-3.0.html",
    "GPL-3.0+": "http://www.gnu.org/licenses/gpl-3.0.html",
    "GPL-3.0": "http://www.gnu.org/licenses/gpl-3.0.html",
    "LGPL-2.1-only": "http://www.gnu.org/licenses/lgpl-2.1.html",
    "LGPL-2.1-or-later": "http://www.gnu.org/licenses/lgpl-2.1.html",
    "LGPL-2.1+": "http://www.gnu.org/licenses/lgpl-2.1.html",
    "LGPL-2.1": "http://www.gnu.org/licenses/lgpl-2.1.html",
    "LGPL-3.0-only": "http://www.gnu.org/licenses/lgpl-3.0.html",
    "LGPL-3.0-or-later": "http://www.gnu.org/licenses/lgpl-3.0.html",
    "LGPL-3.0+": "http://www.gnu.org/licenses/lgpl-3.0.html",
    "LGPL-3.0": "http://www.gnu.org/licenses/lgpl-3.0.html",
    "AGPL-3.0-only": "http://www.gnu.org/licenses/agpl-3.0.html",
    "AGPL-3.0-or-later": "http://www.gnu.org/licenses/agpl-3.0.html",
    "AGPL-3.0+": "http://www.gnu.org/licenses/agpl-3.0.html",
    "AGPL-3.0": "http://www.gnu.org/licenses/agpl-3.0.html",
    "ISC": "https://www.isc.org/downloads/software-support-policy/isc-license/",
    "MPL-2.0": "http://www.mozilla.org/MPL/2.0",
    "UPL-1.0": "https://oss.oracle.com/licenses/upl/",
    "WTFPL": "http://www.wtfpl.net/txt/copying/",
    "Unlicense": "http://unlicense.org/UNLICENSE",
    "X11 License": "http://www.xfree86.org/3.3.6/COPYRIGHT2.html#3",
    "XFree86-1.1": "http://www.xfree86.org/current/LICENSE4.html",
}

log = get_logger("database")


@dataclass(frozen=True)
class LicenseInfo:
    """Database row for one SPDX license identifier."""

    license_id: str
    name: str
    reference: str
    is_fsf_libre: bool
    is_osi_approved: bool
    is_deprecated: bool


class LicenseDatabase:
    """Read-only table of SPDX license identifiers for one run."""

    def __init__(self, licenses: Mapping[str, LicenseInfo]) -> None:
        self._licenses: Dict[str, LicenseInfo] = dict(licenses)

    @classmethod
    def load(cls, path: Path | None = None) -> "LicenseDatabase":
        """Load an SPDX ``licenses.json`` file, defaulting to the bundled copy."""
        if path is None:
            text = (
                resources.files(_BUNDLED_PACKAGE)
                .joinpath(_BUNDLED_FILENAME)
                .read_text(encoding="utf-8")
            )
            source = f"bundled {_BUNDLED_FILENAME}"
        else:
            try:
                text = Path(path).read_text(encoding="utf-8")
            except OSError as exc:
                raise FileSystemError(f"Unable to read license database {path}: {exc}") from exc
            source = str(path)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FileSystemError(f"License database {source} is not valid JSON: {exc}") from exc
        database = cls.from_spdx(payload)
        log.debug("Loaded %d licenses from %s", len(database), source)
        return database

    @classmethod
    def from_spdx(cls, payload: object) -> "LicenseDatabase":
        """Build the table from the SPDX license-list-data JSON layout."""
        licenses: Dict[str, LicenseInfo] = {}
        rows = payload.get("licenses") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            return cls(licenses)
        for row in rows:
            if not isinstance(row, dict):
                continue
            license_id = row.get("licenseId")
            if not isinstance(license_id, str) or not license_id:
                continue
            reference = LICENSE_URLS.get(license_id) or str(row.get("reference") or "")
            licenses[license_id] = LicenseInfo(
                license_id=license_id,
                name=str(row.get("name") or license_id),
                reference=reference,
                is_fsf_libre=bool(row.get("isFsfLibre", False)),
                is_osi_approved=bool(row.get("isOsiApproved", False)),
                is_deprecated=bool(row.get("isDeprecatedLicenseId", False)),
            )
        return cls(licenses)

    def get(self, license_id: str) -> Optional[LicenseInfo]:
        return self._licenses.get(license_id)

    def __contains__(self, license_id: object) -> bool:
        return license_id in self._licenses

    def __iter__(self) -> Iterator[str]:
        return iter(self._licenses)

    def __len__(self) -> int:
        return len(self._licenses)


__all__ = ["LICENSE_URLS", "LicenseDatabase", "LicenseInfo"]
