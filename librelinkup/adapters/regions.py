"""Regional API origins for the LibreLinkUp backend.

Each account is provisioned in one geographic partition. An unknown
region code resolves to an empty origin; the collector rejects that as
a configuration error when it first needs the origin.
"""

_API_HOSTS: dict[str, str] = {
    "US": "api-us.libreview.io",
    "EU": "api-eu.libreview.io",
    "DE": "api-de.libreview.io",
    "FR": "api-fr.libreview.io",
    "JP": "api-jp.libreview.io",
    "AP": "api-ap.libreview.io",
    "AU": "api-au.libreview.io",
    "AE": "api-ae.libreview.io",
}


def available_regions() -> list[str]:
    return list(_API_HOSTS)


def resolve_region(code: str) -> str:
    """Return the https origin for a region code, or "" if the code is unknown."""
    host = _API_HOSTS.get(code)
    return f"https://{host}" if host else ""
