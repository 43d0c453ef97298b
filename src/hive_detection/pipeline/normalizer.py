"""Normalize provider payloads into `AnalysisResult`.

The provider schema is treated as a loosely-typed tree: every nested field is
optional, malformed entries are skipped, and nothing raises past `normalize`.

Expected shape (only the parts that are read)::

    {"status": {"response": {"output": [{
        "time": 123,
        "classes": [{"class": "ai_generated", "score": 0.97}, ...],
        "algorithmic_tags": {"c2pa": {...}, "xmp": {...}, "exif": {...}}
    }]}}}
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
import math
from typing import Any

from hive_detection.constants import (
    AI_GENERATED_CLASS,
    DECISION_THRESHOLD,
    GENERATOR_ALIASES,
    GENERATOR_DISPLAY_NAMES,
    GENERATOR_NOISE_FLOOR,
    MODEL_NAME,
    NON_GENERATOR_CLASSES,
    NOT_AI_GENERATED_CLASS,
)
from hive_detection.core.types import (
    AnalysisBreakdown,
    AnalysisDetails,
    AnalysisResult,
    C2PAMetadata,
    EXIFMetadata,
    GeneratorScore,
    ImageMetadata,
    XMPMetadata,
)

log = logging.getLogger(__name__)


class ResponseNormalizer:
    """Maps the provider's classification output to a stable result."""

    def __init__(
        self,
        *,
        threshold: float = DECISION_THRESHOLD,
        noise_floor: float = GENERATOR_NOISE_FLOOR,
        model_name: str = MODEL_NAME,
    ) -> None:
        """Initialize the normalizer.

        Args:
            threshold: Confidence at or above which an image counts as AI-generated.
            noise_floor: Generator scores at or below this are not reported.
            model_name: Backend identifier written to `analysis.model`.
        """
        self.threshold = threshold
        self.noise_floor = noise_floor
        self.model_name = model_name

    def normalize(self, raw: Any) -> AnalysisResult:
        """Convert a raw provider payload into an `AnalysisResult`."""
        output = _first_output(raw)
        scores = _class_scores(output.get("classes"))

        details: list[str] = []
        if not scores:
            log.warning("Provider response contained no classification output")
            return self._result(
                confidence=0.0,
                details=[
                    "AI Detection Confidence: 0.0%",
                    "No classification output was returned by the provider",
                ],
                output=output,
            )

        if AI_GENERATED_CLASS in scores:
            confidence = scores[AI_GENERATED_CLASS]
        elif NOT_AI_GENERATED_CLASS in scores:
            confidence = 1.0 - scores[NOT_AI_GENERATED_CLASS]
        else:
            # Documented default: no verdict class means no positive AI signal.
            log.warning(
                "Provider response has neither %r nor %r; defaulting confidence to 0",
                AI_GENERATED_CLASS,
                NOT_AI_GENERATED_CLASS,
            )
            confidence = 0.0
            details.append("No AI-generation score was reported; confidence defaults to 0%")

        generators = self.generator_scores(scores)

        details.insert(0, f"AI Detection Confidence: {_pct(confidence)}")
        if generators:
            top, *rest = generators
            details.append(f"Likely Generator: {top.name} ({_pct(top.score)})")
            details.extend(f"{g.name}: {_pct(g.score)}" for g in rest)

        metadata = _metadata(output.get("algorithmic_tags"))
        if metadata is not None and metadata.c2pa is not None:
            details.append(f"C2PA Metadata: {metadata.c2pa.claim_generator or 'unknown'}")
            details.append(f"Source Type: {metadata.c2pa.digital_source_type or 'unknown'}")

        processing_time = output.get("time")
        if _is_number(processing_time):
            details.append(f"Processing Time: {processing_time}ms")

        return self._result(
            confidence=confidence,
            details=details,
            output=output,
            generators=tuple(generators),
            metadata=metadata,
        )

    def generator_scores(self, scores: Mapping[str, float]) -> list[GeneratorScore]:
        """Merge aliases, drop noise, and order generators by descending score."""
        merged: dict[str, float] = {}
        for cls, score in scores.items():
            if cls in NON_GENERATOR_CLASSES:
                continue
            slug = GENERATOR_ALIASES.get(cls, cls)
            merged[slug] = max(score, merged.get(slug, 0.0))

        generators = [
            GeneratorScore(name=format_generator_name(slug), slug=slug, score=score)
            for slug, score in merged.items()
            if score > self.noise_floor
        ]
        generators.sort(key=lambda g: (-g.score, g.name))
        return generators

    def _result(
        self,
        *,
        confidence: float,
        details: list[str],
        output: Mapping[str, Any],
        generators: tuple[GeneratorScore, ...] = (),
        metadata: ImageMetadata | None = None,
    ) -> AnalysisResult:
        breakdown = AnalysisBreakdown(
            human_likelihood=1.0 - confidence,
            ai_artifacts=confidence,
            details=tuple(details),
            generators=generators,
        )
        return AnalysisResult(
            confidence=confidence,
            is_ai_generated=confidence >= self.threshold,
            analysis=AnalysisDetails(
                model=self.model_name,
                breakdown=breakdown,
                metadata=metadata,
                generator=generators[0] if generators else None,
            ),
        )


def format_generator_name(slug: str) -> str:
    """Display name for a provider generator slug."""
    canonical = GENERATOR_ALIASES.get(slug, slug)
    if canonical in GENERATOR_DISPLAY_NAMES:
        return GENERATOR_DISPLAY_NAMES[canonical]
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("_") if word)


# --- Tolerant extraction helpers ---


def _first_output(raw: Any) -> Mapping[str, Any]:
    """Return `status.response.output[0]` or an empty mapping."""
    node: Any = raw
    for key in ("status", "response", "output"):
        node = node.get(key) if isinstance(node, Mapping) else None
    if isinstance(node, list) and node and isinstance(node[0], Mapping):
        return node[0]
    return {}


def _class_scores(classes: Any) -> dict[str, float]:
    """Map class name to score, keeping the highest score for duplicates."""
    scores: dict[str, float] = {}
    if not isinstance(classes, list):
        return scores
    for entry in classes:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("class")
        score = entry.get("score")
        if not isinstance(name, str) or not name or not _is_number(score):
            continue
        clamped = min(max(float(score), 0.0), 1.0)
        scores[name] = max(clamped, scores.get(name, 0.0))
    return scores


def _metadata(tags: Any) -> ImageMetadata | None:
    if not isinstance(tags, Mapping):
        return None
    c2pa = tags.get("c2pa")
    xmp = tags.get("xmp")
    exif = tags.get("exif")
    metadata = ImageMetadata(
        c2pa=C2PAMetadata(
            claim_generator=_str(c2pa, "claim_generator"),
            digital_source_type=_str(c2pa, "actions_digital_source_type"),
            action=_str(c2pa, "actions_action"),
            software_agent=_str(c2pa, "actions_software_agent"),
        )
        if isinstance(c2pa, Mapping)
        else None,
        xmp=XMPMetadata(
            digital_source_file_type=_str(xmp, "digital_source_file_type"),
            credit=_str(xmp, "credit"),
            digital_source_type=_str(xmp, "digital_source_type"),
        )
        if isinstance(xmp, Mapping)
        else None,
        exif=EXIFMetadata(make=_str(exif, "make")) if isinstance(exif, Mapping) else None,
    )
    if metadata.c2pa is None and metadata.xmp is None and metadata.exif is None:
        return None
    return metadata


def _str(mapping: Mapping[str, Any], key: str) -> str | None:
    value = mapping.get(key)
    return value if isinstance(value, str) and value else None


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _pct(score: float) -> str:
    return f"{score * 100:.1f}%"
