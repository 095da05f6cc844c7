"""
Region Catalog - Static anatomical configuration for joint assessment

Responsibilities:
- Load region catalog and disease-activity bands from JSON (once)
- Validate configuration structure on load
- Answer catalog lookups (region by index, known joint names)

Design principles:
- Immutable after load: regions are tuples of frozen Region objects
- Fail fast: invalid configuration raises before any assessment starts
- No assessment state: safe to share across all sessions

Joint names may repeat across regions ('PIP' and 'DIP' exist in both
Hands and Feet). Selections are stored as flat sets per phase, so a
repeated name is one selection regardless of which region it came from.
"""

import json
import logging
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

from joint_assessment.contracts import ActivityBand, Region

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "assessment_config.json"


class RegionCatalog:
    """
    Read-only region catalog shared by every assessment session.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Load and validate catalog configuration.

        Args:
            config_path: Path to assessment_config.json. Defaults to the
                bundled data/assessment_config.json.

        Raises:
            FileNotFoundError: If the configuration file doesn't exist
            ValueError: If the configuration is structurally invalid
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        if not self.config_path.exists():
            raise FileNotFoundError(f"Assessment config not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            config = json.load(f)

        self._validate_config(config)
        self.version = config.get("version", "unknown")

        self.regions: Tuple[Region, ...] = tuple(
            Region(name=r["name"], joints=tuple(r["joints"]))
            for r in config["regions"]
        )
        self.activity_bands: Tuple[ActivityBand, ...] = tuple(
            ActivityBand(label=b["label"], upper=b.get("max"))
            for b in config["activity_bands"]
        )
        self.known_joints: FrozenSet[str] = frozenset(
            joint for region in self.regions for joint in region.joints
        )

        logger.info(
            f"Region catalog loaded: {len(self.regions)} regions, "
            f"{len(self.known_joints)} distinct joints (config version {self.version})"
        )

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def region_count(self) -> int:
        return len(self.regions)

    @property
    def last_index(self) -> int:
        return len(self.regions) - 1

    def get_region(self, index: int) -> Region:
        """
        Get region by catalog position.

        Raises:
            IndexError: If index is outside 0..last_index
        """
        if index < 0 or index >= len(self.regions):
            raise IndexError(f"Region index {index} out of range (0-{self.last_index})")
        return self.regions[index]

    def is_known_joint(self, joint: str) -> bool:
        return joint in self.known_joints

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_config(self, config: dict):
        """
        Validate configuration structure on load.

        Checks:
        - regions exists and is non-empty
        - Every region has a name and a non-empty joints list
        - No blank joint names, no duplicate joints within one region
        - activity_bands exists and is non-empty
        - Regions and bands are objects, band bounds are numbers
        - Band bounds strictly increase; only the last band may be open-ended

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if not isinstance(config, dict):
            raise ValueError("Assessment config validation failed:\n  - Config root must be an object")

        regions = config.get("regions")
        if not regions:
            errors.append("Missing or empty 'regions' in config")
        elif not isinstance(regions, list):
            errors.append("'regions' must be a list")
        else:
            for i, region in enumerate(regions):
                if not isinstance(region, dict):
                    errors.append(f"Region at index {i} must be an object")
                    continue

                name = region.get("name")
                if not name:
                    errors.append(f"Region at index {i} missing 'name'")
                    continue

                joints = region.get("joints")
                if not joints:
                    errors.append(f"Region '{name}' has empty joints array")
                    continue
                if not isinstance(joints, list):
                    errors.append(f"Region '{name}' joints must be a list")
                    continue

                seen = set()
                for joint in joints:
                    if not isinstance(joint, str) or not joint.strip():
                        errors.append(f"Region '{name}' has blank joint name")
                        continue
                    if joint in seen:
                        errors.append(f"Duplicate joint '{joint}' in region '{name}'")
                    seen.add(joint)

        bands = config.get("activity_bands")
        if not bands:
            errors.append("Missing or empty 'activity_bands' in config")
        elif not isinstance(bands, list):
            errors.append("'activity_bands' must be a list")
        else:
            previous = None
            for i, band in enumerate(bands):
                if not isinstance(band, dict):
                    errors.append(f"Activity band at index {i} must be an object")
                    continue
                if not band.get("label"):
                    errors.append(f"Activity band at index {i} missing 'label'")
                upper = band.get("max")
                if upper is None:
                    if i != len(bands) - 1:
                        errors.append(f"Only the last activity band may omit 'max' (index {i})")
                    continue
                if isinstance(upper, bool) or not isinstance(upper, (int, float)):
                    errors.append(f"Activity band at index {i} 'max' must be a number")
                    continue
                if previous is not None and upper <= previous:
                    errors.append(f"Activity band bounds must increase (index {i})")
                previous = upper

        if errors:
            error_msg = "Assessment config validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)
