"""SPDX license identifier validation."""

from collections.abc import Iterable

from spdx_license_list import LICENSES


class SpdxLicenseCatalog:
    """Case-insensitive lookup over the SPDX license list.

    Defaults to the identifiers shipped with spdx-license-list; tests may pass
    their own identifiers.
    """

    def __init__(self, license_ids: Iterable[str] | None = None) -> None:
        ids = LICENSES.keys() if license_ids is None else license_ids
        self._ids = {license_id.upper() for license_id in ids}

    def is_valid(self, license_id: str) -> bool:
        return license_id.upper() in self._ids
