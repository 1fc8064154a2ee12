"""Climate profile module for the region weather engine.

A climate profile is the static, per-region description of the climate
that weather systems perturb: baseline temperature and moisture, geography
(latitude, elevation, coast and terrain), storminess and a fixed set of
special climate factors. Profiles are immutable and validated on creation.

``resolve_profile`` is the single place where missing region parameters are
filled in, following one fallback policy:

    explicit parameter -> biome template -> global default
"""

import math
import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ProfileValidationError


# Latitude bands, their upper latitude bound and a representative latitude.
# Band names match the ones region templates are organised by.
LATITUDE_BANDS = ('equatorial', 'tropical', 'temperate', 'subarctic', 'polar')

_BAND_UPPER_BOUNDS = (
    ('equatorial', 10.0),
    ('tropical', 30.0),
    ('temperate', 60.0),
    ('subarctic', 75.0),
)

BAND_LATITUDES = {
    'equatorial': 5.0,
    'tropical': 20.0,
    'temperate': 45.0,
    'subarctic': 65.0,
    'polar': 80.0,
}

# Numeric profile fields with their allowed range (None = unbounded)
NUMERIC_FIELDS = {
    'base_temp': (None, None),
    'temp_variation': (0.0, None),
    'precipitation': (0.0, 1.0),
    'humidity': (0.0, 1.0),
    'windiness': (0.0, 1.0),
    'latitude': (0.0, 90.0),
    'elevation': (0.0, None),
    'maritime_influence': (0.0, 1.0),
    'terrain_roughness': (0.0, 1.0),
    'storm_frequency': (0.0, 1.0),
    'storm_intensity': (0.0, 1.0),
    'seasonal_extremes': (0.0, 1.0),
}

# Older region data spells a few special factors differently
_SPECIAL_FACTOR_ALIASES = {
    'has_monsoon_season': 'monsoon',
    'has_dry_season': 'dry_season',
    'has_fog': 'fog',
}


def band_for_latitude(latitude: float) -> str:
    """Return the latitude band containing a latitude in degrees (0-90)."""
    for band, upper in _BAND_UPPER_BOUNDS:
        if latitude < upper:
            return band
    return 'polar'


def _snake_case(key: str) -> str:
    """Normalise camelCase keys coming from region data to snake_case."""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


@dataclass(frozen=True)
class SpecialFactors:
    """Fixed set of boolean climate modifiers for a region.

    Only these names exist; anything else is rejected when a profile is
    built from region data.
    """
    monsoon: bool = False
    dry_season: bool = False
    high_rainfall: bool = False
    polar_day: bool = False
    polar_night: bool = False
    fog: bool = False
    high_diurnal_variation: bool = False
    valley: bool = False
    orographic: bool = False
    tectonic: bool = False
    volcanic: bool = False

    def __post_init__(self):
        problems = [
            f"special factor {f.name} must be a boolean"
            for f in fields(self)
            if not isinstance(getattr(self, f.name), bool)
        ]
        if problems:
            raise ProfileValidationError(problems)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'SpecialFactors':
        """Build special factors from a mapping, rejecting unknown names.

        Args:
            data: Factor names (snake_case, camelCase or legacy ``has*``
                spellings) mapped to booleans

        Returns:
            SpecialFactors with unspecified factors set to False

        Raises:
            ProfileValidationError: If a name is unknown or a value is not bool
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        values = {}
        problems = []
        for raw_key, value in data.items():
            key = _snake_case(str(raw_key))
            key = _SPECIAL_FACTOR_ALIASES.get(key, key)
            if key not in known:
                problems.append(f"unknown special factor {raw_key!r}")
            elif not isinstance(value, bool):
                problems.append(f"special factor {raw_key!r} must be a boolean")
            else:
                values[key] = value

        if problems:
            raise ProfileValidationError(problems)
        return cls(**values)

    def enabled(self) -> List[str]:
        """Return the names of the factors that are switched on."""
        return [f.name for f in fields(self) if getattr(self, f.name)]


@dataclass(frozen=True)
class ClimateProfile:
    """Static climate parameters of one region.

    Temperatures are in °F and elevation in feet; every influence factor is
    normalised to [0, 1]. The profile validates itself on construction and
    cannot be modified afterwards.
    """
    biome: str
    base_temp: float
    temp_variation: float
    precipitation: float
    humidity: float
    windiness: float
    latitude: float
    elevation: float
    maritime_influence: float
    terrain_roughness: float
    storm_frequency: float
    storm_intensity: float
    seasonal_extremes: float
    special_factors: SpecialFactors = field(default_factory=SpecialFactors)
    name: str = ""

    def __post_init__(self):
        problems = []

        if not isinstance(self.biome, str) or not self.biome:
            problems.append("biome must be a non-empty string")

        for name, (low, high) in NUMERIC_FIELDS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                problems.append(f"{name} must be a number, got {value!r}")
                continue
            if not math.isfinite(value):
                problems.append(f"{name} must be finite")
                continue
            if low is not None and value < low:
                problems.append(f"{name}={value} is below {low}")
            if high is not None and value > high:
                problems.append(f"{name}={value} is above {high}")

        if not isinstance(self.special_factors, SpecialFactors):
            problems.append("special_factors must be a SpecialFactors record")

        if problems:
            raise ProfileValidationError(problems)

    @property
    def latitude_band(self) -> str:
        """Latitude band used for daylight and prevailing wind lookups."""
        return band_for_latitude(self.latitude)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClimateProfile':
        """Strictly build a profile from a mapping.

        Unlike ``resolve_profile`` nothing is defaulted: every numeric field
        and the biome must be present.

        Args:
            data: Profile fields in snake_case or camelCase

        Returns:
            Validated ClimateProfile

        Raises:
            ProfileValidationError: If fields are missing, unknown or invalid
        """
        if not isinstance(data, Mapping):
            raise ProfileValidationError([f"profile must be a mapping, got {type(data).__name__}"])

        normalised = {_snake_case(str(key)): value for key, value in data.items()}
        known = {f.name for f in fields(cls)}

        problems = [f"unknown profile field {key!r}" for key in sorted(set(normalised) - known)]
        required = ['biome'] + list(NUMERIC_FIELDS)
        problems.extend(f"missing required field {key!r}" for key in required if key not in normalised)
        if problems:
            raise ProfileValidationError(problems)

        special = normalised.get('special_factors')
        if not isinstance(special, SpecialFactors):
            normalised['special_factors'] = SpecialFactors.from_dict(special)

        return cls(**normalised)

    def to_dict(self) -> Dict[str, Any]:
        """Return the profile as a JSON-ready dictionary."""
        return asdict(self)


# Typical parameters for each biome. Values mirror the region templates the
# GM tool ships; any of them can be overridden per region.
BIOME_TEMPLATES: Dict[str, Dict[str, Any]] = {
    'tropical-rainforest': {
        'latitude': 5, 'elevation': 500, 'maritime_influence': 0.8, 'terrain_roughness': 0.6,
        'base_temp': 80, 'temp_variation': 8, 'precipitation': 0.9, 'humidity': 0.85,
        'windiness': 0.3, 'storm_frequency': 0.6, 'storm_intensity': 0.5, 'seasonal_extremes': 0.1,
        'special_factors': {'monsoon': True, 'high_rainfall': True},
    },
    'tropical-seasonal': {
        'latitude': 15, 'elevation': 800, 'maritime_influence': 0.4, 'terrain_roughness': 0.4,
        'base_temp': 78, 'temp_variation': 12, 'precipitation': 0.6, 'humidity': 0.65,
        'windiness': 0.35, 'storm_frequency': 0.5, 'storm_intensity': 0.5, 'seasonal_extremes': 0.3,
        'special_factors': {'monsoon': True, 'dry_season': True},
    },
    'desert': {
        'latitude': 25, 'elevation': 2000, 'maritime_influence': 0.1, 'terrain_roughness': 0.7,
        'base_temp': 75, 'temp_variation': 25, 'precipitation': 0.05, 'humidity': 0.2,
        'windiness': 0.5, 'storm_frequency': 0.15, 'storm_intensity': 0.4, 'seasonal_extremes': 0.6,
        'special_factors': {'dry_season': True, 'high_diurnal_variation': True},
    },
    'temperate-grassland': {
        'latitude': 40, 'elevation': 1500, 'maritime_influence': 0.2, 'terrain_roughness': 0.3,
        'base_temp': 55, 'temp_variation': 20, 'precipitation': 0.4, 'humidity': 0.5,
        'windiness': 0.6, 'storm_frequency': 0.4, 'storm_intensity': 0.6, 'seasonal_extremes': 0.8,
        'special_factors': {},
    },
    'temperate-deciduous': {
        'latitude': 45, 'elevation': 800, 'maritime_influence': 0.5, 'terrain_roughness': 0.5,
        'base_temp': 52, 'temp_variation': 18, 'precipitation': 0.5, 'humidity': 0.6,
        'windiness': 0.4, 'storm_frequency': 0.4, 'storm_intensity': 0.4, 'seasonal_extremes': 0.7,
        'special_factors': {},
    },
    'temperate-rainforest': {
        'latitude': 45, 'elevation': 500, 'maritime_influence': 0.9, 'terrain_roughness': 0.7,
        'base_temp': 50, 'temp_variation': 12, 'precipitation': 0.85, 'humidity': 0.8,
        'windiness': 0.45, 'storm_frequency': 0.5, 'storm_intensity': 0.4, 'seasonal_extremes': 0.3,
        'special_factors': {'fog': True, 'high_rainfall': True, 'orographic': True},
    },
    'boreal-forest': {
        'latitude': 55, 'elevation': 1200, 'maritime_influence': 0.3, 'terrain_roughness': 0.6,
        'base_temp': 35, 'temp_variation': 22, 'precipitation': 0.45, 'humidity': 0.6,
        'windiness': 0.4, 'storm_frequency': 0.3, 'storm_intensity': 0.35, 'seasonal_extremes': 0.9,
        'special_factors': {},
    },
    'tundra': {
        'latitude': 70, 'elevation': 1500, 'maritime_influence': 0.5, 'terrain_roughness': 0.4,
        'base_temp': 15, 'temp_variation': 20, 'precipitation': 0.25, 'humidity': 0.6,
        'windiness': 0.6, 'storm_frequency': 0.25, 'storm_intensity': 0.4, 'seasonal_extremes': 1.0,
        'special_factors': {'polar_day': True, 'polar_night': True},
    },
}

# Last-resort values for a biome without a template
GLOBAL_DEFAULTS: Dict[str, Any] = {
    'base_temp': 60, 'temp_variation': 15, 'precipitation': 0.5, 'humidity': 0.5,
    'windiness': 0.5, 'latitude': 45, 'elevation': 1000, 'maritime_influence': 0.5,
    'terrain_roughness': 0.5, 'storm_frequency': 0.3, 'storm_intensity': 0.5,
    'seasonal_extremes': 0.5,
}


def resolve_profile(biome: str, parameters: Optional[Mapping[str, Any]] = None) -> ClimateProfile:
    """Resolve region parameters into a complete climate profile.

    This is the one canonical fallback policy for region parameters and is
    meant to be called once whenever a region is created or edited:

    1. An explicit parameter always wins (``latitude`` beats
       ``latitude_band``, which maps to the band's representative latitude).
    2. Otherwise the biome template value is used.
    3. Otherwise the global default is used.

    Special factors from the parameters are merged over the biome's own
    factors, so a region can switch a biome factor on or off.

    Args:
        biome: Biome tag such as ``"temperate-deciduous"``
        parameters: Region parameters in snake_case or camelCase

    Returns:
        Validated ClimateProfile

    Raises:
        ProfileValidationError: For unknown parameter names, unknown
            special factors, an unknown latitude band or invalid values
    """
    raw = {_snake_case(str(key)): value for key, value in (parameters or {}).items()}
    template = BIOME_TEMPLATES.get(biome, {})

    allowed = set(NUMERIC_FIELDS) | {'special_factors', 'name', 'latitude_band'}
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise ProfileValidationError([f"unknown region parameter {key!r}" for key in unknown])

    resolved: Dict[str, Any] = {}
    for key in NUMERIC_FIELDS:
        if raw.get(key) is not None:
            resolved[key] = raw[key]
        elif key == 'latitude' and raw.get('latitude_band') is not None:
            band = raw['latitude_band']
            if band not in BAND_LATITUDES:
                raise ProfileValidationError([f"unknown latitude band {band!r}"])
            resolved[key] = BAND_LATITUDES[band]
        elif key in template:
            resolved[key] = template[key]
        else:
            resolved[key] = GLOBAL_DEFAULTS[key]

    # Region factors override the biome's, name by name
    base_factors = asdict(SpecialFactors.from_dict(template.get('special_factors')))
    override_factors = asdict(SpecialFactors.from_dict(raw.get('special_factors')))
    explicit = {
        _SPECIAL_FACTOR_ALIASES.get(_snake_case(str(k)), _snake_case(str(k)))
        for k in (raw.get('special_factors') or {})
    }
    merged = {
        name: override_factors[name] if name in explicit else base_factors[name]
        for name in base_factors
    }

    return ClimateProfile(
        biome=biome,
        special_factors=SpecialFactors(**merged),
        name=raw.get('name') or biome,
        **resolved,
    )
