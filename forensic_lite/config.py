"""
Configuration for Forensic Analysis Engine
==========================================

Environment variables (case-insensitive, also read from .env):
- LOG_LEVEL: logging level for the API/runner (default: INFO)
- HOST / PORT / RELOAD: dev server binding (default: 0.0.0.0:8000, no reload)
- EMAIL_CONFIDENCE / NAME_CONFIDENCE / ORGANIZATION_CONFIDENCE: discovery confidences
- PRONOUN_CONFIDENCE / RELATIONAL_CONFIDENCE: alias resolution confidences
- MERGE_WHOLE_WORD_NAMES: only merge names on whole-word containment (default: false)
- BEHAVIORAL_SHIFT_WINDOW_DAYS: max gap for a classification shift (default: 7)
- GHOSTING_GAP_DAYS: silence that counts as ghosting (default: 7)
- CUSTODY_VERIFY_ON_APPEND: re-walk the chain on every append (default: true)
- MAX_WORKERS: extraction thread pool size (default: 4)
"""

from typing import Dict
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Service info
    service_version: str = "1.0.0"
    log_level: str = "INFO"

    # Dev server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # Entity discovery
    email_confidence: float = 0.95
    name_confidence: float = 0.75
    organization_confidence: float = 0.70
    min_entity_mentions: int = 1
    merge_whole_word_names: bool = False  # substring containment unless set
    phone_min_digits: int = 10
    identifier_window: int = 50  # chars between a phone/account and its owner's name

    # Alias resolution
    pronoun_confidence: float = 0.70
    relational_confidence: float = 0.60

    # Contradiction detection
    behavioral_shift_window_days: int = 7
    third_party_min_shared_keywords: int = 2
    temporal_min_relatedness: float = 0.5

    # Behavioural patterns
    pattern_escalation_instances: int = 2
    ghosting_gap_days: int = 7

    # Timeline
    timeline_gap_days: int = 7
    timeline_gap_high_days: int = 14
    timeline_gap_critical_days: int = 30

    # Liability weights (sum to 1.0)
    weight_contradiction: float = 0.30
    weight_behavioral: float = 0.20
    weight_evidence: float = 0.15
    weight_consistency: float = 0.20
    weight_causal: float = 0.15

    # Liability points
    points_critical: int = 4
    points_high: int = 3
    points_medium: int = 2
    points_low: int = 1
    contradiction_multiplier: float = 10.0
    behavioral_points_per_type: float = 20.0
    evidence_baseline: float = 30.0
    evidence_withheld_points: float = 30.0
    evidence_provided_points: float = 10.0
    temporal_contradiction_points: float = 25.0
    direct_contradiction_points: float = 10.0
    story_change_points: float = 20.0
    initiated_event_points: float = 5.0
    received_payment_points: float = 15.0
    promise_points: float = 3.0

    # Custody
    custody_verify_on_append: bool = True
    default_user_id: str = "system"
    default_device_id: str = "forensic-engine"

    # Pipeline
    max_workers: int = 4

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

    def liability_weights(self) -> Dict[str, float]:
        """Weights used for the overall liability score"""
        return {
            "contradiction": self.weight_contradiction,
            "behavioral": self.weight_behavioral,
            "evidence": self.weight_evidence,
            "consistency": self.weight_consistency,
            "causal": self.weight_causal,
        }

    def severity_points(self) -> Dict[str, int]:
        """Points per contradiction severity value"""
        return {
            "critical": self.points_critical,
            "high": self.points_high,
            "medium": self.points_medium,
            "low": self.points_low,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
