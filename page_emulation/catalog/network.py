"""
Predefined network throttling profiles.
Values match the Chrome DevTools presets; throughput is in bytes per second.
"""

from __future__ import annotations

import types

from page_emulation.models.emulation import NetworkProfile

# Sentinel accepted by emulate_network to clear throttling.
NO_EMULATION = "No emulation"
OFFLINE = "Offline"


def _profile(name: str, download_kbps: float, upload_kbps: float, latency_ms: float) -> NetworkProfile:
    # DevTools applies a 10-20% packet overhead to the nominal link speeds.
    return NetworkProfile(
        name=name,
        download=download_kbps * 1000 / 8,
        upload=upload_kbps * 1000 / 8,
        latency=latency_ms,
    )


NETWORK_PROFILES: types.MappingProxyType[str, NetworkProfile] = types.MappingProxyType(
    {
        "Slow 3G": _profile("Slow 3G", 500 * 0.8, 500 * 0.8, 400 * 5),
        "Fast 3G": _profile("Fast 3G", 1600 * 0.9, 750 * 0.9, 150 * 3.75),
        "Slow 4G": _profile("Slow 4G", 1600 * 0.9, 750 * 0.9, 150 * 3.75),
        "Fast 4G": _profile("Fast 4G", 9000 * 0.9, 1500 * 0.9, 60 * 2.75),
        OFFLINE: NetworkProfile(name=OFFLINE, download=0, upload=0, latency=0, offline=True),
    }
)

THROTTLING_OPTIONS: tuple[str, ...] = (NO_EMULATION, *NETWORK_PROFILES)


def resolve_network_profile(name: str) -> NetworkProfile | None:
    """Return the profile for *name*, or ``None`` for ``"No emulation"``.

    Raises:
        KeyError: If *name* is neither a profile nor the sentinel.
    """
    if name == NO_EMULATION:
        return None
    return NETWORK_PROFILES[name]
