"""
MAXSPAN Configuration

Config location: config/maxspan.yaml

Schema:
- parsing: SPAN portfolio element names, Bhav placeholder option types
- merge: default snapshot merge mode, decimal places for merged values
- report: number of contributors and scenario totals to report
- logging: level, optional log file and rotation
"""

from dataclasses import dataclass, field
from typing import List, Optional

from maxspan.engine.snapshot_merge import DEFAULT_DECIMALS, MergeMode
from maxspan.parsers.bhav_parser import DEFAULT_PLACEHOLDER_OPTION_TYPES
from maxspan.parsers.span_parser import PORTFOLIO_TAGS


@dataclass
class ParsingConfig:
    """Parser settings."""
    portfolio_tags: List[str] = field(default_factory=lambda: list(PORTFOLIO_TAGS))
    placeholder_option_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_OPTION_TYPES)
    )


@dataclass
class MergeConfig:
    """Snapshot merge settings."""
    default_mode: str = MergeMode.MERGE_MAX.value
    decimals: int = DEFAULT_DECIMALS


@dataclass
class ReportConfig:
    """Portfolio report settings."""
    top_contributors: int = 15
    scenario_preview: int = 20


@dataclass
class LoggingConfig:
    """Logging settings for loguru."""
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass
class SpanConfig:
    """Complete MAXSPAN configuration."""

    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "SpanConfig":
        """Create config from dictionary with nested dataclass instantiation."""
        parsing = data.get("parsing") or {}
        merge = data.get("merge") or {}
        report = data.get("report") or {}
        logging = data.get("logging") or {}

        return cls(
            parsing=ParsingConfig(
                portfolio_tags=list(parsing.get("portfolio_tags", PORTFOLIO_TAGS)),
                placeholder_option_types=list(
                    parsing.get("placeholder_option_types", DEFAULT_PLACEHOLDER_OPTION_TYPES)
                ),
            ),
            merge=MergeConfig(
                default_mode=merge.get("default_mode", MergeMode.MERGE_MAX.value),
                decimals=merge.get("decimals", DEFAULT_DECIMALS),
            ),
            report=ReportConfig(
                top_contributors=report.get("top_contributors", 15),
                scenario_preview=report.get("scenario_preview", 20),
            ),
            logging=LoggingConfig(
                level=logging.get("level", "INFO"),
                file=logging.get("file"),
                rotation=logging.get("rotation", "10 MB"),
                retention=logging.get("retention", "7 days"),
            ),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.parsing.portfolio_tags:
            errors.append("parsing.portfolio_tags must not be empty")

        valid_modes = {m.value for m in MergeMode}
        if self.merge.default_mode not in valid_modes:
            errors.append(f"Invalid merge.default_mode: {self.merge.default_mode}. Must be one of {sorted(valid_modes)}")
        if not 0 <= self.merge.decimals <= 15:
            errors.append(f"merge.decimals must be in [0, 15], got {self.merge.decimals}")

        if self.report.top_contributors < 1:
            errors.append("report.top_contributors must be >= 1")
        if self.report.scenario_preview < 1:
            errors.append("report.scenario_preview must be >= 1")

        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if self.logging.level.upper() not in valid_levels:
            errors.append(f"Invalid logging.level: {self.logging.level}. Must be one of {valid_levels}")

        return errors
