"""
Configuration for the attendance analytics service.
"""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

ENV_PREFIX = 'ATTENDANCE_'


@dataclass(frozen=True)
class AnalyticsConfig:
    """Tunable defaults for the analytics service."""
    trend_days: int = 30
    risk_history_days: int = 30
    absentee_threshold: float = 80.0
    data_file: str = 'attendance_data/attendance.json'

    def __post_init__(self):
        if self.trend_days < 0:
            raise ValueError(f"TREND_DAYS must be non-negative, got {self.trend_days}")
        if self.risk_history_days < 0:
            raise ValueError(f"RISK_HISTORY_DAYS must be non-negative, got {self.risk_history_days}")
        if not 0 <= self.absentee_threshold <= 100:
            raise ValueError(
                f"ABSENTEE_THRESHOLD must be between 0 and 100, got {self.absentee_threshold}"
            )

    @classmethod
    def from_dict(cls, config: Mapping[str, Any] = None) -> 'AnalyticsConfig':
        """
        Build configuration from a dictionary.

        Args:
            config: Mapping with upper-case keys (TREND_DAYS, RISK_HISTORY_DAYS,
                ABSENTEE_THRESHOLD, DATA_FILE); missing keys use defaults

        Returns:
            AnalyticsConfig instance
        """
        config = config or {}
        defaults = cls()
        try:
            return cls(
                trend_days=int(config.get('TREND_DAYS', defaults.trend_days)),
                risk_history_days=int(config.get('RISK_HISTORY_DAYS', defaults.risk_history_days)),
                absentee_threshold=float(config.get('ABSENTEE_THRESHOLD', defaults.absentee_threshold)),
                data_file=str(config.get('DATA_FILE', defaults.data_file)),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid analytics configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> 'AnalyticsConfig':
        """Build configuration from ATTENDANCE_* environment variables."""
        environ = os.environ if environ is None else environ
        config = {
            key[len(ENV_PREFIX):]: value
            for key, value in environ.items()
            if key.startswith(ENV_PREFIX)
        }
        return cls.from_dict(config)

    def to_dict(self) -> Dict[str, Any]:
        return {key.upper(): value for key, value in asdict(self).items()}
