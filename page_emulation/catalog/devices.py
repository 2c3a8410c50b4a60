"""
Device descriptors for mobile emulation.
Defines user agents and viewports for the devices known to Chrome DevTools,
plus the curated list of common devices offered to the controller.
"""

from __future__ import annotations

import types

from page_emulation.models.emulation import DeviceDescriptor, Viewport

DEFAULT_DEVICE = "iPhone 8"

# Sentinel accepted by emulate_device to restore desktop mode.
NO_EMULATION = "No emulation"

# Device families left out of COMMON_DEVICES (matched case-insensitively).
UNCOMMON_DEVICE_FAMILIES: tuple[str, ...] = (
    "blackberry",
    "lumia",
    "nokia",
    "kindle",
    "jio",
    "optimus",
)

DESKTOP_VIEWPORT = Viewport(
    width=1920,
    height=1080,
    device_scale_factor=1,
    is_mobile=False,
    has_touch=False,
    is_landscape=True,
)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

_UA_IOS_10 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 10_3_1 like Mac OS X) AppleWebKit/603.1.30 "
    "(KHTML, like Gecko) Version/10.0 Mobile/14E304 Safari/602.1"
)
_UA_IOS_11 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 11_0 like Mac OS X) AppleWebKit/604.1.38 "
    "(KHTML, like Gecko) Version/11.0 Mobile/15A372 Safari/604.1"
)
_UA_IOS_12 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 12_2 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/12.1 Mobile/15E148 Safari/604.1"
)
_UA_IOS_13 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 13_7 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/13.1 Mobile/15E148 Safari/604.1"
)
_UA_IOS_14 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/14.0.3 Mobile/15E148 Safari/604.1"
)
_UA_IOS_15 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 15_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/15.0 Mobile/15E148 Safari/604.1"
)
_UA_IOS_16 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)
_UA_IOS_17 = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
_UA_IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 11_0 like Mac OS X) AppleWebKit/604.1.34 "
    "(KHTML, like Gecko) Version/11.0 Mobile/15A5341f Safari/604.1"
)


def _android_ua(build: str, chrome: str, *, mobile: bool = True) -> str:
    suffix = "Mobile Safari/537.36" if mobile else "Safari/537.36"
    return f"Mozilla/5.0 (Linux; {build}) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{chrome} {suffix}"


def _device(name: str, user_agent: str, width: int, height: int, scale: float, *, is_mobile: bool = True) -> DeviceDescriptor:
    return DeviceDescriptor(
        name=name,
        user_agent=user_agent,
        viewport=Viewport(
            width=width,
            height=height,
            device_scale_factor=scale,
            is_mobile=is_mobile,
            has_touch=True,
            is_landscape=False,
        ),
    )


def _landscape(device: DeviceDescriptor) -> DeviceDescriptor:
    """Return the landscape variant of a portrait *device*."""
    vp = device.viewport
    return DeviceDescriptor(
        name=f"{device.name} landscape",
        user_agent=device.user_agent,
        viewport=vp.model_copy(update={"width": vp.height, "height": vp.width, "is_landscape": True}),
    )


_PORTRAIT_DEVICES: tuple[DeviceDescriptor, ...] = (
    # Legacy and niche devices
    _device(
        "Blackberry PlayBook",
        "Mozilla/5.0 (PlayBook; U; RIM Tablet OS 2.1.0; en-US) AppleWebKit/536.2+ (KHTML like Gecko) "
        "Version/7.2.1.0 Safari/536.2+",
        600,
        1024,
        1,
    ),
    _device(
        "BlackBerry Z30",
        "Mozilla/5.0 (BB10; Touch) AppleWebKit/537.10+ (KHTML, like Gecko) Version/10.0.9.2372 Mobile Safari/537.10+",
        360,
        640,
        2,
    ),
    _device(
        "JioPhone 2",
        "Mozilla/5.0 (Mobile; LYF/F300B/LYF-F300B-001-01-15-130718-i;Android; rv:48.0) Gecko/48.0 Firefox/48.0 KAIOS/2.5",
        240,
        320,
        1,
    ),
    _device(
        "Kindle Fire HDX",
        "Mozilla/5.0 (Linux; U; en-us; KFAPWI Build/JDQ39) AppleWebKit/535.19 (KHTML, like Gecko) Silk/3.13 "
        "Safari/535.19 Silk-Accelerated=true",
        800,
        1280,
        2,
    ),
    _device("LG Optimus L70", _android_ua("U; Android 4.4.2; en-us; LGMS323 Build/KOT49I.MS32310c", "75.0.3765.0"), 384, 640, 1.25),
    _device(
        "Microsoft Lumia 950",
        "Mozilla/5.0 (Windows Phone 10.0; Android 4.2.1; Microsoft; Lumia 950) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/46.0.2486.0 Mobile Safari/537.36 Edge/14.14263",
        360,
        640,
        4,
    ),
    _device(
        "Nokia Lumia 520",
        "Mozilla/5.0 (compatible; MSIE 10.0; Windows Phone 8.0; Trident/6.0; IEMobile/10.0; ARM; Touch; "
        "NOKIA; Lumia 520)",
        320,
        533,
        1.5,
    ),
    _device(
        "Nokia N9",
        "Mozilla/5.0 (MeeGo; NokiaN9) AppleWebKit/534.13 (KHTML, like Gecko) NokiaBrowser/8.5.0 Mobile Safari/534.13",
        480,
        854,
        1,
    ),
    # Android phones
    _device("Galaxy Note 3", _android_ua("U; Android 4.3; en-us; SM-N900T Build/JSS15J", "75.0.3765.0"), 360, 640, 3),
    _device("Galaxy S5", _android_ua("Android 5.0; SM-G900P Build/LRX21T", "75.0.3765.0"), 360, 640, 3),
    _device("Galaxy S8", _android_ua("Android 7.0; SM-G950U Build/NRD90M", "62.0.3202.84"), 360, 740, 3),
    _device("Galaxy S9+", _android_ua("Android 8.0.0; SM-G965U Build/R16NW", "63.0.3239.111"), 320, 658, 4.5),
    _device("Moto G4", _android_ua("Android 7.0; Moto G (4)", "75.0.3765.0"), 360, 640, 3),
    _device("Nexus 5", _android_ua("Android 6.0; Nexus 5 Build/MRA58N", "75.0.3765.0"), 360, 640, 3),
    _device("Nexus 6P", _android_ua("Android 8.0.0; Nexus 6P Build/OPP3.170518.006", "75.0.3765.0"), 412, 732, 3.5),
    _device("Pixel 2", _android_ua("Android 8.0; Pixel 2 Build/OPD3.170816.012", "75.0.3765.0"), 411, 731, 2.625),
    _device("Pixel 2 XL", _android_ua("Android 8.0.0; Pixel 2 XL Build/OPD1.170816.004", "75.0.3765.0"), 411, 823, 3.5),
    _device("Pixel 3", _android_ua("Android 9; Pixel 3 Build/PQ1A.181105.017.A1", "66.0.3359.158"), 393, 786, 2.75),
    _device("Pixel 4", _android_ua("Android 10; Pixel 4", "81.0.4044.138"), 353, 745, 3),
    _device("Pixel 5", _android_ua("Android 11; Pixel 5", "90.0.4430.91"), 393, 851, 2.75),
    # Tablets
    _device("Galaxy Tab S4", _android_ua("Android 8.1.0; SM-T837A", "70.0.3538.80", mobile=False), 712, 1138, 2.25),
    _device("iPad", _UA_IPAD, 768, 1024, 2),
    _device("iPad Mini", _UA_IPAD, 768, 1024, 2),
    _device("iPad Pro", _UA_IPAD, 1024, 1366, 2),
    # iPhones
    _device("iPhone SE", _UA_IOS_10, 320, 568, 2),
    _device("iPhone 8", _UA_IOS_11, 375, 667, 2),
    _device("iPhone 8 Plus", _UA_IOS_11, 414, 736, 3),
    _device("iPhone X", _UA_IOS_11, 375, 812, 3),
    _device("iPhone XR", _UA_IOS_12, 414, 896, 3),
    _device("iPhone 11", _UA_IOS_13, 414, 828, 2),
    _device("iPhone 11 Pro", _UA_IOS_13, 375, 635, 3),
    _device("iPhone 12", _UA_IOS_14, 390, 844, 3),
    _device("iPhone 12 Pro", _UA_IOS_14, 390, 844, 3),
    _device("iPhone 13", _UA_IOS_15, 390, 844, 3),
    _device("iPhone 13 Pro", _UA_IOS_15, 390, 844, 3),
    _device("iPhone 14", _UA_IOS_16, 390, 663, 3),
    _device("iPhone 14 Pro", _UA_IOS_16, 393, 660, 3),
    _device("iPhone 15", _UA_IOS_17, 393, 659, 3),
    _device("iPhone 15 Pro", _UA_IOS_17, 393, 659, 3),
)


def _build_catalog() -> dict[str, DeviceDescriptor]:
    catalog: dict[str, DeviceDescriptor] = {}
    for device in _PORTRAIT_DEVICES:
        catalog[device.name] = device
        landscape = _landscape(device)
        catalog[landscape.name] = landscape
    return catalog


DEVICE_DESCRIPTORS: types.MappingProxyType[str, DeviceDescriptor] = types.MappingProxyType(_build_catalog())


def is_common_device_name(name: str) -> bool:
    """Whether *name* is eligible for the common-device list."""
    lowered = name.lower()
    if "landscape" in lowered:
        return False
    return not any(family in lowered for family in UNCOMMON_DEVICE_FAMILIES)


# Curated in display order; the first entry is the fallback for unknown names.
_CURATED_DEVICES: tuple[str, ...] = (
    # iPhone series
    "iPhone SE",
    "iPhone 8",
    "iPhone 12",
    "iPhone 12 Pro",
    "iPhone 13",
    "iPhone 13 Pro",
    "iPhone 14",
    "iPhone 14 Pro",
    "iPhone 15",
    "iPhone 15 Pro",
    # Android series
    "Galaxy S5",
    "Galaxy S8",
    "Galaxy S9+",
    "Pixel 2",
    "Pixel 3",
    "Pixel 4",
    "Pixel 5",
    "Nexus 5",
    "Nexus 6P",
    # Tablets
    "iPad",
    "iPad Pro",
    "Galaxy Tab S4",
)

COMMON_DEVICES: tuple[str, ...] = tuple(
    name for name in _CURATED_DEVICES if name in DEVICE_DESCRIPTORS and is_common_device_name(name)
)


def is_known_device(name: str | None) -> bool:
    """Whether *name* is present in the device catalog."""
    return name is not None and name in DEVICE_DESCRIPTORS


def get_device(name: str) -> DeviceDescriptor:
    """Return the descriptor for *name*; raises ``KeyError`` if unknown."""
    return DEVICE_DESCRIPTORS[name]


def resolve_device(name: str | None, default: str = DEFAULT_DEVICE) -> tuple[str, DeviceDescriptor]:
    """Resolve a requested device name to a usable descriptor.

    Never raises: a missing name uses *default*, and any name not in
    the catalog falls back to the first entry of ``COMMON_DEVICES``.

    Args:
        name: Requested device name, or ``None`` / blank for the default.
        default: Device used when no name is supplied.

    Returns:
        Tuple of (resolved device name, descriptor).
    """
    requested = name.strip() if name else ""
    if not requested:
        requested = default
    if is_known_device(requested):
        return requested, get_device(requested)
    fallback = COMMON_DEVICES[0]
    return fallback, get_device(fallback)
