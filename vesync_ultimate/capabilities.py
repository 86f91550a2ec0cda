"""Static capability registry keyed by VeSync device type."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class Variant(str, Enum):
    """Request/response envelope shapes used across device generations."""

    LEGACY_FLAT = "legacy-flat"
    BYPASS_V1 = "bypass-v1"
    BYPASS_V2 = "bypass-v2"
    VITAL_QUIRK = "vital-quirk"


class DeviceFamily(str, Enum):
    """Product family deciding the accessor surface of a device."""

    PURIFIER = "purifier"
    HUMIDIFIER = "humidifier"
    TOWER_FAN = "tower_fan"
    UNKNOWN = "unknown"


class FeatureTag(str, Enum):
    """Optional capabilities gating device operations and accessors."""

    DISPLAY = "display"
    CHILD_LOCK = "child_lock"
    NIGHT_LIGHT = "night_light"
    AIR_QUALITY = "air_quality"
    TIMER = "timer"
    AUTO_PREFERENCE = "auto_preference"
    LIGHT_DETECTION = "light_detection"
    OSCILLATION = "oscillation"
    HUMIDITY = "humidity"
    MIST = "mist"
    WARM_MIST = "warm_mist"
    AUTOMATIC_STOP = "automatic_stop"
    DRYING = "drying"
    FILTER_LIFE = "filter_life"


class Quirk(str, Enum):
    """Model specific wire differences within a variant."""

    INDICATOR_LIGHT_DISPLAY = "indicator_light_display"
    MIST_LEVEL_METHOD = "mist_level_method"
    AUTO_PRO_MODE = "auto_pro_mode"


@dataclass(frozen=True, slots=True)
class CapabilityProfile:
    """Describe what a device type supports and how it is addressed."""

    variant: Variant
    family: DeviceFamily = DeviceFamily.UNKNOWN
    features: frozenset[FeatureTag] = frozenset()
    levels: tuple[int, ...] = ()
    modes: tuple[str, ...] = ()
    auto_preferences: tuple[str, ...] = ()
    warm_levels: tuple[int, ...] = ()
    night_light_modes: tuple[str, ...] = ()
    quirks: frozenset[Quirk] = frozenset()

    def has_feature(self, tag: FeatureTag) -> bool:
        """Return True when ``tag`` is part of the profile."""

        return tag in self.features

    def has_quirk(self, quirk: Quirk) -> bool:
        """Return True when the profile carries ``quirk``."""

        return quirk in self.quirks

    @property
    def max_level(self) -> int:
        """Return the highest manual level, or 0 without levels."""

        return max(self.levels, default=0)

    @property
    def is_default(self) -> bool:
        """Return True for fallback profiles without any curated data."""

        return not (self.features or self.levels or self.modes)


DEFAULT_PROFILE = CapabilityProfile(variant=Variant.BYPASS_V1)

# The Core200S family has no auto mode; an auto request is sent as manual.
AUTO_TO_MANUAL_DEVICE_TYPES = frozenset(
    {"Core200S", "LAP-C201S-AUSR", "LAP-C202S-WUSR"}
)


def _features(*tags: FeatureTag) -> frozenset[FeatureTag]:
    return frozenset(tags)


_CORE_200S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.PURIFIER,
    features=_features(
        FeatureTag.DISPLAY,
        FeatureTag.CHILD_LOCK,
        FeatureTag.NIGHT_LIGHT,
        FeatureTag.TIMER,
        FeatureTag.FILTER_LIFE,
    ),
    levels=(1, 2, 3),
    modes=("manual", "sleep"),
    night_light_modes=("on", "off", "dim"),
)

_CORE_300S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.PURIFIER,
    features=_features(
        FeatureTag.DISPLAY,
        FeatureTag.CHILD_LOCK,
        FeatureTag.AIR_QUALITY,
        FeatureTag.TIMER,
        FeatureTag.FILTER_LIFE,
    ),
    levels=(1, 2, 3),
    modes=("auto", "manual", "sleep"),
)

_CORE_400S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.PURIFIER,
    features=_CORE_300S.features,
    levels=(1, 2, 3, 4),
    modes=("auto", "manual", "sleep"),
)

_VITAL_100S = CapabilityProfile(
    variant=Variant.VITAL_QUIRK,
    family=DeviceFamily.PURIFIER,
    features=_features(
        FeatureTag.DISPLAY,
        FeatureTag.CHILD_LOCK,
        FeatureTag.AIR_QUALITY,
        FeatureTag.TIMER,
        FeatureTag.FILTER_LIFE,
        FeatureTag.AUTO_PREFERENCE,
    ),
    levels=(1, 2, 3, 4),
    modes=("auto", "manual", "sleep"),
    auto_preferences=("default", "efficient", "quiet"),
)

_VITAL_200S = CapabilityProfile(
    variant=Variant.VITAL_QUIRK,
    family=DeviceFamily.PURIFIER,
    features=_VITAL_100S.features | {FeatureTag.LIGHT_DETECTION},
    levels=(1, 2, 3, 4),
    modes=("auto", "manual", "sleep", "pet"),
    auto_preferences=("default", "efficient", "quiet"),
)

_EVERESTAIR = CapabilityProfile(
    variant=Variant.BYPASS_V2,
    family=DeviceFamily.PURIFIER,
    features=_VITAL_200S.features,
    levels=(1, 2, 3),
    modes=("auto", "manual", "sleep", "turbo"),
    auto_preferences=("default", "efficient", "quiet"),
)

_TOWER_FAN = CapabilityProfile(
    variant=Variant.BYPASS_V2,
    family=DeviceFamily.TOWER_FAN,
    features=_features(FeatureTag.DISPLAY, FeatureTag.TIMER, FeatureTag.OSCILLATION),
    levels=tuple(range(1, 13)),
    modes=("normal", "advancedSleep"),
)

_HUMIDIFIER_BASE = _features(
    FeatureTag.DISPLAY,
    FeatureTag.HUMIDITY,
    FeatureTag.MIST,
    FeatureTag.TIMER,
    FeatureTag.AUTOMATIC_STOP,
)

_CLASSIC_300S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.HUMIDIFIER,
    features=_HUMIDIFIER_BASE | {FeatureTag.NIGHT_LIGHT},
    levels=tuple(range(1, 10)),
    modes=("auto", "manual", "sleep"),
)

_CLASSIC_200S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.HUMIDIFIER,
    features=_HUMIDIFIER_BASE,
    levels=(1, 2, 3),
    modes=("auto", "manual", "sleep"),
    quirks=frozenset({Quirk.INDICATOR_LIGHT_DISPLAY, Quirk.MIST_LEVEL_METHOD}),
)

_DUAL_200S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.HUMIDIFIER,
    features=_HUMIDIFIER_BASE,
    levels=(1, 2),
    modes=("auto", "manual"),
)

_LV600S = CapabilityProfile(
    variant=Variant.BYPASS_V1,
    family=DeviceFamily.HUMIDIFIER,
    features=_HUMIDIFIER_BASE | {FeatureTag.WARM_MIST},
    levels=tuple(range(1, 10)),
    modes=("auto", "humidity", "manual", "sleep"),
    warm_levels=(1, 2, 3),
)

_OASISMIST_1000S = CapabilityProfile(
    variant=Variant.BYPASS_V2,
    family=DeviceFamily.HUMIDIFIER,
    features=_HUMIDIFIER_BASE | {FeatureTag.NIGHT_LIGHT},
    levels=tuple(range(1, 10)),
    modes=("auto", "manual", "sleep"),
)

_SUPERIOR_6000S = CapabilityProfile(
    variant=Variant.BYPASS_V2,
    family=DeviceFamily.HUMIDIFIER,
    features=(_HUMIDIFIER_BASE - {FeatureTag.AUTOMATIC_STOP})
    | {FeatureTag.DRYING, FeatureTag.FILTER_LIFE},
    levels=tuple(range(1, 10)),
    modes=("auto", "manual", "sleep", "humidity"),
    quirks=frozenset({Quirk.AUTO_PRO_MODE}),
)

_LV_PUR131S = CapabilityProfile(
    variant=Variant.LEGACY_FLAT,
    family=DeviceFamily.PURIFIER,
    features=_features(
        FeatureTag.DISPLAY,
        FeatureTag.CHILD_LOCK,
        FeatureTag.AIR_QUALITY,
        FeatureTag.TIMER,
        FeatureTag.FILTER_LIFE,
    ),
    levels=(1, 2, 3),
    modes=("auto", "manual", "sleep"),
)


def _entries(
    profile: CapabilityProfile, device_types: Iterable[str]
) -> dict[str, CapabilityProfile]:
    return {device_type: profile for device_type in device_types}


_REGISTRY: Mapping[str, CapabilityProfile] = MappingProxyType(
    {
        **_entries(_CORE_200S, ("Core200S", "LAP-C201S-AUSR", "LAP-C202S-WUSR")),
        **_entries(
            _CORE_300S,
            ("Core300S", "LAP-C301S-WJP", "LAP-C302S-WUSB", "LAP-C301S-WAAA"),
        ),
        **_entries(
            _CORE_400S,
            (
                "Core400S",
                "LAP-C401S-WJP",
                "LAP-C401S-WUSR",
                "LAP-C401S-WAAA",
                "Core600S",
                "LAP-C601S-WUS",
                "LAP-C601S-WUSR",
                "LAP-C601S-WEU",
            ),
        ),
        **_entries(
            _VITAL_100S,
            (
                "LAP-V102S-AASR",
                "LAP-V102S-WUS",
                "LAP-V102S-WEU",
                "LAP-V102S-AUSR",
                "LAP-V102S-WJP",
            ),
        ),
        **_entries(
            _VITAL_200S,
            (
                "LAP-V201S-AASR",
                "LAP-V201S-WJP",
                "LAP-V201S-WEU",
                "LAP-V201S-WUS",
                "LAP-V201-AUSR",
                "LAP-V201S-AUSR",
                "LAP-V201S-AEUR",
            ),
        ),
        **_entries(
            _EVERESTAIR,
            ("LAP-EL551S-AUS", "LAP-EL551S-AEUR", "LAP-EL551S-WEU", "LAP-EL551S-WUS"),
        ),
        **_entries(
            _TOWER_FAN,
            ("LTF-F422S-KEU", "LTF-F422S-WUSR", "LTF-F422_WJP", "LTF-F422S-WUS"),
        ),
        "Classic300S": _CLASSIC_300S,
        "Classic200S": _CLASSIC_200S,
        **_entries(
            _DUAL_200S,
            ("Dual200S", "LUH-D301S-WUSR", "LUH-D301S-WJP", "LUH-D301S-WEU"),
        ),
        **_entries(
            _LV600S,
            (
                "LUH-A601S-WUSB",
                "LUH-A601S-AUSW",
                "LUH-A602S-WUSR",
                "LUH-A602S-WUS",
                "LUH-A602S-WEUR",
                "LUH-A602S-WEU",
                "LUH-A602S-WJP",
                "LUH-A602S-WUSC",
                "LUH-O451S-WEU",
                "LUH-O451S-WUS",
                "LUH-O451S-WUSR",
                "LUH-O601S-WUS",
                "LUH-O601S-KUS",
            ),
        ),
        **_entries(_OASISMIST_1000S, ("LUH-M101S-WUS", "LUH-M101S-WEUR")),
        **_entries(_SUPERIOR_6000S, ("LEH-S601S-WUS", "LEH-S601S-WUSR")),
        **_entries(_LV_PUR131S, ("LV-PUR131S", "LV-RH131S")),
    }
)

_PREFIX_FALLBACKS: tuple[tuple[str, DeviceFamily, Variant], ...] = (
    ("LV-", DeviceFamily.PURIFIER, Variant.LEGACY_FLAT),
    ("LAP-V", DeviceFamily.PURIFIER, Variant.VITAL_QUIRK),
    ("LAP-EL", DeviceFamily.PURIFIER, Variant.BYPASS_V2),
    ("LAP-", DeviceFamily.PURIFIER, Variant.BYPASS_V1),
    ("Core", DeviceFamily.PURIFIER, Variant.BYPASS_V1),
    ("LTF-", DeviceFamily.TOWER_FAN, Variant.BYPASS_V2),
    ("LUH-M", DeviceFamily.HUMIDIFIER, Variant.BYPASS_V2),
    ("LEH-", DeviceFamily.HUMIDIFIER, Variant.BYPASS_V2),
    ("LUH-", DeviceFamily.HUMIDIFIER, Variant.BYPASS_V1),
    ("Classic", DeviceFamily.HUMIDIFIER, Variant.BYPASS_V1),
    ("Dual", DeviceFamily.HUMIDIFIER, Variant.BYPASS_V1),
)


def lookup(device_type: str) -> CapabilityProfile:
    """Return the capability profile for ``device_type``.

    Exact matches win. Unknown types sharing a known model prefix receive a
    minimal profile for that family, every other type the default profile.
    Fallback profiles carry no features, levels or modes, so they only
    narrow which operations succeed.
    """

    profile = _REGISTRY.get(device_type)
    if profile is not None:
        return profile
    for prefix, family, variant in _PREFIX_FALLBACKS:
        if device_type.startswith(prefix):
            return CapabilityProfile(variant=variant, family=family)
    return DEFAULT_PROFILE


def registered_device_types() -> tuple[str, ...]:
    """Return every device type with a curated profile."""

    return tuple(_REGISTRY)


def redirects_auto_to_manual(device_type: str) -> bool:
    """Return True for the device family that maps auto onto manual."""

    return device_type in AUTO_TO_MANUAL_DEVICE_TYPES
