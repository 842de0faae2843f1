"""
Job role fit: top-3 job groups for the report.

Per role config:
    base      = sum(axis * weight) over analyticity, flow, metacognition, authenticity
    arc_boost = min(0.04, 0.02 + 0.01 * max(0, arc - min_arc - 1)) when arc >= min_arc, else 0
    final     = clamp01(base + arc_boost)

A group scores the max final among its roles. Groups are sorted by score
(desc) then name; the top three are reported as integer percents.

With strict_min_filter (default) roles failing their minimum requirements
are dropped first; when that empties the pool every role is kept.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from backend_neuprint.analytics.job_groups import (
    GROUP_ROLE_TEMPLATES,
    JOB_INDEX,
    group_id_for,
    roles_in_group,
)
from backend_neuprint.core.exceptions import ConfigurationError
from backend_neuprint.core.numeric import clamp01, is_finite_number, round2, round_half_up
from backend_neuprint.neuprint_logging import get_logger

logger = get_logger(__name__)

AXIS_KEYS = ("analyticity", "flow", "metacognition", "authenticity")
WEIGHT_SUM_TOLERANCE = 1e-6
ARC_BOOST_CAP = 0.04
DEFAULT_ARC_LEVEL = 3
TOP_GROUPS = 3


@dataclass(frozen=True)
class NeuprintAxes:
    analyticity: float = 0.0
    flow: float = 0.0
    metacognition: float = 0.0
    authenticity: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], label: str = "axes") -> NeuprintAxes:
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"{label} must be a mapping of {AXIS_KEYS}")
        return cls(**{k: data.get(k) for k in AXIS_KEYS})

    def validate(self, label: str) -> None:
        for k in AXIS_KEYS:
            v = getattr(self, k)
            if not is_finite_number(v) or v < 0 or v > 1:
                raise ConfigurationError(f"{label}.{k} must be in [0,1]. Got: {v}")

    def items(self) -> list[tuple[str, float]]:
        return [(k, getattr(self, k)) for k in AXIS_KEYS]


@dataclass(frozen=True)
class MinRequirements:
    arc_level: float = 0.0
    analyticity: float | None = None
    flow: float | None = None
    metacognition: float | None = None
    authenticity: float | None = None


@dataclass(frozen=True)
class RoleConfig:
    role_code: str
    job_id: str
    onet_code: str
    oecd_core_skills: tuple[str, ...]
    neuprint_axes_weights: NeuprintAxes
    min_requirements: MinRequirements = field(default_factory=MinRequirements)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RoleConfig:
        if isinstance(data, RoleConfig):
            return data
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"role config must be a mapping, got {type(data).__name__}")
        weights = NeuprintAxes.from_mapping(data.get("neuprint_axes_weights") or {}, "neuprint_axes_weights")
        req = data.get("min_requirements") or {}
        if not isinstance(req, Mapping):
            raise ConfigurationError("min_requirements must be a mapping")
        arc = req.get("arc_level", 0)
        if not is_finite_number(arc):
            raise ConfigurationError(f"min_requirements.arc_level must be a number. Got: {arc!r}")
        requirements = MinRequirements(
            arc_level=arc,
            **{k: req[k] for k in AXIS_KEYS if is_finite_number(req.get(k))},
        )
        return cls(
            role_code=str(data.get("role_code") or ""),
            job_id=str(data.get("job_id") or ""),
            onet_code=str(data.get("onet_code") or ""),
            oecd_core_skills=tuple(str(s) for s in data.get("oecd_core_skills") or ()),
            neuprint_axes_weights=weights,
            min_requirements=requirements,
        )

    def validate(self) -> None:
        """Raise ConfigurationError for unknown jobs or weights that are out of range or do not sum to 1."""
        if self.job_id not in JOB_INDEX:
            raise ConfigurationError(f"RoleConfig.job_id not found in JOB_INDEX: {self.job_id}")
        w = self.neuprint_axes_weights
        w.validate("neuprint_axes_weights")
        total = sum(v for _, v in w.items())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError(f"neuprint_axes_weights must sum to 1.0. Got sum={total:.6f}")


DEFAULT_ROLE_CONFIGS_MINIMAL: tuple[RoleConfig, ...] = (
    RoleConfig(
        role_code="RFS-STRAT-001",
        job_id="strategy_analyst",
        onet_code="13-1111.00",
        oecd_core_skills=("analysis", "strategy", "policy"),
        neuprint_axes_weights=NeuprintAxes(analyticity=0.10, flow=0.04, metacognition=0.00, authenticity=0.86),
        min_requirements=MinRequirements(arc_level=4),
    ),
    RoleConfig(
        role_code="RFS-DATA-001",
        job_id="data_scientist",
        onet_code="15-2051.00",
        oecd_core_skills=("data", "modeling", "inference"),
        neuprint_axes_weights=NeuprintAxes(analyticity=0.30, flow=0.20, metacognition=0.10, authenticity=0.40),
        min_requirements=MinRequirements(arc_level=3),
    ),
    RoleConfig(
        role_code="RFS-ARCH-001",
        job_id="systems_architect",
        onet_code="15-1299.08",
        oecd_core_skills=("architecture", "systems", "engineering"),
        neuprint_axes_weights=NeuprintAxes(analyticity=0.20, flow=0.25, metacognition=0.35, authenticity=0.20),
        min_requirements=MinRequirements(arc_level=3),
    ),
)


@dataclass
class RoleScore:
    config: RoleConfig
    group_name: str
    job_name: str
    ok: bool
    score: float


@dataclass
class GroupFit:
    group_name: str
    percent: int
    roles: list[str]
    recommended_role: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_name": self.group_name,
            "percent": self.percent,
            "roles": list(self.roles),
            "recommended_role": self.recommended_role,
        }


@dataclass
class RoleFitResult:
    top_groups: list[GroupFit]
    pattern_interpretation: str
    role_scores: list[RoleScore] = field(default_factory=list)

    @property
    def recommended_roles_top3(self) -> list[str]:
        return [g.recommended_role for g in self.top_groups]

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary_lines": [f"{g.group_name}: {g.percent}%" for g in self.top_groups],
            "top_groups": [g.to_dict() for g in self.top_groups],
            "recommended_roles_top3": self.recommended_roles_top3,
            "recommended_roles_line": f"Recommended roles include: {', '.join(self.recommended_roles_top3)}.",
            "pattern_interpretation": self.pattern_interpretation,
        }

    def diagnostics(self) -> dict[str, Any]:
        return {
            "roles": [
                {"role_code": r.config.role_code, "job_id": r.config.job_id, "ok": r.ok, "score": round2(r.score)}
                for r in self.role_scores
            ],
        }


def arc_boost(user_arc: float, min_arc: float) -> float:
    if not is_finite_number(user_arc) or not is_finite_number(min_arc):
        return 0.0
    if user_arc < min_arc:
        return 0.0
    delta = user_arc - min_arc
    return clamp01(min(ARC_BOOST_CAP, 0.02 + 0.01 * max(0.0, delta - 1)))


def meets_min_requirements(axes: NeuprintAxes, arc_level: float, cfg: RoleConfig) -> bool:
    req = cfg.min_requirements
    if arc_level < req.arc_level:
        return False
    for k in AXIS_KEYS:
        floor = getattr(req, k)
        if floor is not None and getattr(axes, k) < floor:
            return False
    return True


def score_role_fit(axes: NeuprintAxes, arc_level: float, cfg: RoleConfig) -> float:
    axes.validate("input.axes")
    cfg.validate()
    w = cfg.neuprint_axes_weights
    base = sum(getattr(axes, k) * getattr(w, k) for k in AXIS_KEYS)
    return clamp01(base + arc_boost(arc_level, cfg.min_requirements.arc_level))


def role_fit_interpretation(group_id: int, group_name: str, recommended_role: str) -> str:
    template = GROUP_ROLE_TEMPLATES.get(group_id)
    if template is None:
        return f"Role fit is most aligned with {group_name}, with strongest match for {recommended_role}."
    return template


def compute_role_fit(
    axes: NeuprintAxes,
    arc_level: float = DEFAULT_ARC_LEVEL,
    role_configs: Sequence[RoleConfig | Mapping[str, Any]] | None = None,
    strict_min_filter: bool = True,
) -> RoleFitResult:
    """
    Score every role config and roll them up into the top job groups.

    Raises ConfigurationError for bad axes, weights or job ids.
    """
    configs = [RoleConfig.from_mapping(c) for c in (role_configs or DEFAULT_ROLE_CONFIGS_MINIMAL)]

    scored: list[RoleScore] = []
    for cfg in configs:
        score = score_role_fit(axes, arc_level, cfg)
        job = JOB_INDEX[cfg.job_id]
        scored.append(
            RoleScore(
                config=cfg,
                group_name=job.group_name,
                job_name=job.job_name,
                ok=meets_min_requirements(axes, arc_level, cfg),
                score=score,
            )
        )

    pool = [r for r in scored if r.ok] if strict_min_filter else scored
    if not pool:
        pool = scored

    # max per group; the first role reaching the max is the recommended one
    best: dict[str, RoleScore] = {}
    for r in pool:
        prev = best.get(r.group_name)
        if prev is None or r.score > prev.score:
            best[r.group_name] = r

    ranked = sorted(best.values(), key=lambda r: (-clamp01(r.score), r.group_name))[:TOP_GROUPS]
    top_groups = []
    for r in ranked:
        roles = roles_in_group(r.group_name)
        top_groups.append(
            GroupFit(
                group_name=r.group_name,
                percent=round_half_up(clamp01(r.score) * 100),
                roles=roles,
                recommended_role=r.job_name or (roles[0] if roles else r.group_name),
            )
        )

    interpretation = ""
    if top_groups:
        top1 = top_groups[0]
        group_id = group_id_for(top1.group_name)
        if group_id:
            interpretation = role_fit_interpretation(group_id, top1.group_name, top1.recommended_role)

    result = RoleFitResult(top_groups=top_groups, pattern_interpretation=interpretation, role_scores=scored)
    logger.debug(
        "role_fit_result",
        arc_level=arc_level,
        strict_min_filter=strict_min_filter,
        pool=len(pool),
        top_groups=[(g.group_name, g.percent) for g in top_groups],
    )
    return result


def arc_level_from_code(level_code: str | None) -> int:
    """Level code "L4" -> 4; anything else -> DEFAULT_ARC_LEVEL."""
    code = str(level_code or "").strip()
    if len(code) == 2 and code[0] == "L" and code[1] in "123456":
        return int(code[1])
    return DEFAULT_ARC_LEVEL
