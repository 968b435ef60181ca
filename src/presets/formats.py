"""Release-title patterns backing preset preferred/rejected formats."""

from typing import Dict, Optional, Tuple

from ir.types import CustomFormatIR, FormatSpecIR

PREFERRED_SCORE = 100
REJECTED_SCORE = -10000

PREFER_PREFIX = "Prefer: "
REJECT_PREFIX = "Reject: "

RELEASE_TITLE_SPEC = "ReleaseTitleSpecification"

FORMAT_PATTERNS: Dict[str, str] = {
    # HDR
    "hdr10": r"\bHDR10\b",
    "hdr10plus": r"\bHDR10\+|HDR10Plus\b",
    "dolby-vision": r"\b(DV|DoVi|Dolby[\.\s]?Vision)\b",
    "hlg": r"\bHLG\b",
    # Audio
    "atmos": r"\b(Atmos|ATMOS)\b",
    "truehd": r"\b(TrueHD|True[\.\s]?HD)\b",
    "dts-x": r"\b(DTS[\.\-\s]?X)\b",
    "dts-hd": r"\b(DTS[\.\-\s]?(HD[\.\-\s]?)?(MA)?)\b",
    # Codecs
    "hevc": r"\b(HEVC|[xh][\.\s]?265)\b",
    "av1": r"\bAV1\b",
    "aac": r"\bAAC\b",
    # Unwanted
    "cam": r"\b(CAM|CAMRIP|CAM[\.\-\s]?RIP)\b",
    "telesync": r"\b(TS|TELESYNC|TELE[\.\-\s]?SYNC)\b",
    "telecine": r"\b(TC|TELECINE|TELE[\.\-\s]?CINE)\b",
    "workprint": r"\b(WP|WORKPRINT|WORK[\.\-\s]?PRINT)\b",
    "3d": r"\b3D\b",
    "dubbed": r"\b(DUBBED|DUB)\b",
    # Extras
    "remux": r"\b(REMUX|Remux)\b",
    "imax": r"\bIMAX\b",
    "extended": r"\b(EXTENDED|Extended)\b",
}


def format_specs(format_name: str) -> Tuple[FormatSpecIR, ...]:
    """Specifications for a known format name; empty for unknown names."""
    pattern = FORMAT_PATTERNS.get(format_name)
    if pattern is None:
        return ()
    return (
        FormatSpecIR(
            type=RELEASE_TITLE_SPEC,
            name=format_name,
            value=pattern,
            negate=False,
            required=True,
        ),
    )


def format_to_custom_format(format_name: str, reject: bool) -> Optional[CustomFormatIR]:
    specs = format_specs(format_name)
    if not specs:
        return None
    prefix = REJECT_PREFIX if reject else PREFER_PREFIX
    return CustomFormatIR(
        name=f"{prefix}{format_name}",
        include_when_renaming=False,
        specifications=specs,
    )
