"""
SDAI Calculator - Composite disease-activity score

Simplified Disease Activity Index:
    SDAI = TJC + SJC + PGA/10 + EGA/10 + CRP

- TJC / SJC: tender and swollen joint counts (set cardinalities)
- PGA / EGA: 0-100 mm visual-analog scales, rescaled to 0-10
- CRP: mg/L, used unscaled

Pure functions. No state, no I/O.
"""

from typing import Optional, Sequence

from joint_assessment.contracts import CLINICAL_INPUT_BOUNDS, ActivityBand, ClinicalInputs
from joint_assessment.utils.helpers import clamp

SCORE_DECIMALS = 2


def clamp_clinical_input(field: str, value) -> float:
    """
    Clamp a raw clinical input into its documented range.

    Args:
        field: 'pga', 'ega' or 'crp'
        value: Raw numeric value

    Returns:
        float: Value within CLINICAL_INPUT_BOUNDS[field]

    Raises:
        ValueError: If field is unknown or value is not a number
    """
    if field not in CLINICAL_INPUT_BOUNDS:
        raise ValueError(
            f"Unknown clinical input '{field}' "
            f"(expected one of {', '.join(sorted(CLINICAL_INPUT_BOUNDS))})"
        )
    lower, upper = CLINICAL_INPUT_BOUNDS[field]
    return clamp(value, lower, upper)


def calculate_sdai(tender_count: int, swollen_count: int, inputs: ClinicalInputs) -> float:
    """
    Compute the composite score, rounded to 2 decimals.

    Example:
        >>> calculate_sdai(2, 1, ClinicalInputs(pga=50, ega=20, crp=10))
        20.0
    """
    pga_scaled = inputs.pga / 100 * 10
    ega_scaled = inputs.ega / 100 * 10
    score = tender_count + swollen_count + pga_scaled + ega_scaled + inputs.crp
    return round(score, SCORE_DECIMALS)


def classify_disease_activity(score: float, bands: Sequence[ActivityBand]) -> Optional[str]:
    """
    Map a score onto the first band whose upper bound covers it.

    Args:
        score: Composite score
        bands: Bands in increasing order (as validated by RegionCatalog)

    Returns:
        str: Band label, or None if every band is bounded and the score
        exceeds all of them
    """
    for band in bands:
        if band.upper is None or score <= band.upper:
            return band.label
    return None
