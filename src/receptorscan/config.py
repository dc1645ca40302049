"""Configuration management for receptorscan.

Settings come from default values, an optional TOML file and
command-line flags (which take precedence). A configuration file holds
up to three tables:

    [classifier]
    kinase_families = ["Pkinase", "PK_Tyr_Ser-Thr", "Pkinase_fungal", "Pkinase_C"]
    kinase_evalue = "1e-10"
    domain_evalue = "1e-3"
    rlp_evalue = "1e-3"

    [hmmscan]
    evalue = 0.1
    threads = 8

    [tmbed]
    batch_size = 4
    use_gpu = false

E-value thresholds are kept as ``decimal.Decimal``; quoting them in the
file avoids any binary rounding.

Example:
    >>> from receptorscan.config import Config
    >>> config = Config.load("receptorscan.toml")
    >>> config.classifier.kinase_evalue
    Decimal('1E-10')
"""

from __future__ import annotations

import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Any

import attrs

from receptorscan.core.models import to_decimal

# =============================================================================
# Default Configuration Values
# =============================================================================

# Pfam families treated as protein kinase domains
DEFAULT_KINASE_FAMILIES = ("Pkinase", "PK_Tyr_Ser-Thr", "Pkinase_fungal", "Pkinase_C")

# Inclusive significance thresholds
DEFAULT_KINASE_EVALUE = Decimal("1e-10")
DEFAULT_DOMAIN_EVALUE = Decimal("1e-3")
DEFAULT_RLP_EVALUE = Decimal("1e-3")

# hmmscan reporting defaults (-E / --domE, --cpu)
DEFAULT_HMMSCAN_EVALUE = 0.1
DEFAULT_THREADS = 1

# TMbed defaults
DEFAULT_BATCH_SIZE = 1


def _positive(instance: Any, attribute: attrs.Attribute, value: int) -> None:
    if value < 1:
        raise ValueError(f"{attribute.name} must be at least 1, got {value}")


def _non_negative(instance: Any, attribute: attrs.Attribute, value: Any) -> None:
    if value < 0:
        raise ValueError(f"{attribute.name} must not be negative, got {value}")


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ClassifierConfig:
    """Thresholds and families used for domain selection.

    Attributes:
        kinase_families: Domain labels counted as kinase domains.
        kinase_evalue: Kinase-domain acceptance threshold (RLK).
        domain_evalue: Non-kinase domain acceptance threshold (RLK).
        rlp_evalue: Domain acceptance threshold (RLP).
    """

    kinase_families: tuple[str, ...] = attrs.field(default=DEFAULT_KINASE_FAMILIES, converter=tuple)
    kinase_evalue: Decimal = attrs.field(
        default=DEFAULT_KINASE_EVALUE, converter=to_decimal, validator=_non_negative
    )
    domain_evalue: Decimal = attrs.field(
        default=DEFAULT_DOMAIN_EVALUE, converter=to_decimal, validator=_non_negative
    )
    rlp_evalue: Decimal = attrs.field(
        default=DEFAULT_RLP_EVALUE, converter=to_decimal, validator=_non_negative
    )


@attrs.define
class HmmscanConfig:
    """Settings for the hmmscan step.

    Attributes:
        evalue: Reporting threshold passed as ``-E`` and ``--domE``.
        threads: Worker threads (``--cpu``).
    """

    evalue: float = attrs.field(default=DEFAULT_HMMSCAN_EVALUE, converter=float, validator=_non_negative)
    threads: int = attrs.field(default=DEFAULT_THREADS, converter=int, validator=_positive)


@attrs.define
class TMbedConfig:
    """Settings for the TMbed step.

    Attributes:
        batch_size: Approximate number of residues per batch.
        use_gpu: Run on a GPU when available.
    """

    batch_size: int = attrs.field(default=DEFAULT_BATCH_SIZE, converter=int, validator=_positive)
    use_gpu: bool = True


@attrs.define
class Config:
    """Main configuration container for receptorscan.

    Attributes:
        classifier: Domain selection thresholds.
        hmmscan: hmmscan settings.
        tmbed: TMbed settings.
    """

    classifier: ClassifierConfig = attrs.Factory(ClassifierConfig)
    hmmscan: HmmscanConfig = attrs.Factory(HmmscanConfig)
    tmbed: TMbedConfig = attrs.Factory(TMbedConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file. If None, returns default
                configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a configuration from nested dictionaries.

        Raises:
            ValueError: If a section or key is unknown, or a value invalid.
        """
        sections = {
            "classifier": ClassifierConfig,
            "hmmscan": HmmscanConfig,
            "tmbed": TMbedConfig,
        }

        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section [{name}] must be a table")

            allowed = {field.name for field in attrs.fields(section_cls)}
            unknown = set(values) - allowed
            if unknown:
                raise ValueError(f"Unknown keys in [{name}]: {', '.join(sorted(unknown))}")

            try:
                kwargs[name] = section_cls(**values)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid value in [{name}]: {e}") from e

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)
