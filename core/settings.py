"""
Run settings for one automation session.

Settings are owned by the caller and read-only to the engine for the
duration of a run. They are normalised once here (speeds clamped, title
lists cleaned) and checked with validate() before a session starts.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Brisbane, Australia"


def _clamp(value: Any, low: int, high: int, default: int) -> int:
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _as_list(value: Union[str, Iterable[str], None]) -> List[str]:
    """Accept a list or a comma-separated string; drop blank entries."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


@dataclass(frozen=True)
class CandidateProfile:
    """Who is applying."""
    full_name: str = ""
    location: str = DEFAULT_LOCATION
    background_bio: str = ""


@dataclass
class BotSettings:
    """Validated per-run settings."""
    profile: CandidateProfile = field(default_factory=CandidateProfile)
    job_titles: List[str] = field(default_factory=list)
    blocked_companies: List[str] = field(default_factory=list)
    blocked_titles: List[str] = field(default_factory=list)
    expected_salary: int = 100000
    scan_speed: int = 50
    apply_speed: int = 50
    cooldown_delay: float = 5.0
    stealth_mode: bool = False
    max_jobs: int = 100
    openai_api_key: str = ""

    def __post_init__(self):
        self.job_titles = _as_list(self.job_titles)
        self.blocked_companies = _as_list(self.blocked_companies)
        self.blocked_titles = _as_list(self.blocked_titles)
        self.scan_speed = _clamp(self.scan_speed, 0, 100, 50)
        self.apply_speed = _clamp(self.apply_speed, 0, 100, 50)
        self.max_jobs = max(0, _clamp(self.max_jobs, 0, 1_000_000, 100))
        try:
            self.cooldown_delay = max(0.0, float(self.cooldown_delay))
        except (TypeError, ValueError):
            self.cooldown_delay = 5.0
        try:
            self.expected_salary = int(float(self.expected_salary))
        except (TypeError, ValueError):
            self.expected_salary = 100000
        self.stealth_mode = _as_bool(self.stealth_mode)
        self.openai_api_key = (self.openai_api_key or "").strip()

    @property
    def location(self) -> str:
        return self.profile.location or DEFAULT_LOCATION

    def validate(self) -> List[str]:
        """Validate settings and return list of missing required settings."""
        missing = []
        if not self.openai_api_key:
            missing.append("openai_api_key")
        if not self.job_titles:
            missing.append("job_titles (at least one search title)")
        return missing

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BotSettings":
        """
        Build settings from a flat settings record.

        Keys follow the stored settings shape (full_name, location,
        background_bio, job_titles, ...). A nested "profile" mapping is also
        accepted.
        """
        data = dict(data or {})
        profile_data = dict(data.pop("profile", None) or {})
        profile = CandidateProfile(
            full_name=str(profile_data.get("full_name", data.get("full_name")) or ""),
            location=str(profile_data.get("location", data.get("location")) or DEFAULT_LOCATION),
            background_bio=str(profile_data.get("background_bio", data.get("background_bio")) or ""),
        )

        known = {
            "job_titles", "blocked_companies", "blocked_titles", "expected_salary",
            "scan_speed", "apply_speed", "cooldown_delay", "stealth_mode",
            "max_jobs", "openai_api_key",
        }
        ignored = set(data) - known - {"full_name", "location", "background_bio"}
        if ignored:
            logger.debug(f"Ignoring unknown settings keys: {sorted(ignored)}")

        kwargs = {key: data[key] for key in known if data.get(key) is not None}
        return cls(profile=profile, **kwargs)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BotSettings":
        """Load settings from a YAML file."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        return cls.from_dict(data)

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        return {
            "full_name": self.profile.full_name,
            "location": self.profile.location,
            "background_bio": self.profile.background_bio,
            "job_titles": list(self.job_titles),
            "blocked_companies": list(self.blocked_companies),
            "blocked_titles": list(self.blocked_titles),
            "expected_salary": self.expected_salary,
            "scan_speed": self.scan_speed,
            "apply_speed": self.apply_speed,
            "cooldown_delay": self.cooldown_delay,
            "stealth_mode": self.stealth_mode,
            "max_jobs": self.max_jobs,
            "openai_api_key": self.openai_api_key if include_secrets else bool(self.openai_api_key),
        }


# Example settings YAML accepted by BotSettings.load():
EXAMPLE_SETTINGS_YAML = """
full_name: "Your Name"
location: "Brisbane, Australia"
background_bio: |
  Delivery lead with ten years running infrastructure and digital programs.

expected_salary: 120000

job_titles:
  - "project manager"
  - "program manager"
blocked_companies:
  - "Acme Recruitment"
blocked_titles:
  - "sales"
  - "customer service"

scan_speed: 50       # 0-100, higher is faster
apply_speed: 50      # 0-100, higher is faster
cooldown_delay: 5    # seconds between applications
stealth_mode: false
max_jobs: 100

openai_api_key: "sk-..."
"""
