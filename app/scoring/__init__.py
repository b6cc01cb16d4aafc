"""Nursing-impact scoring for WARN notices."""

from .classifier import apply_impact, infer_care_setting, infer_role_mix, score_notice

__all__ = ["apply_impact", "infer_care_setting", "infer_role_mix", "score_notice"]
