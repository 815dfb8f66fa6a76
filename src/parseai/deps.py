"""
Parse AI - Dependency Injection.

FastAPI dependencies for feature flags and services.
"""

from typing import Annotated

from fastapi import Depends

from parseai.config import FeatureFlags, Settings, get_settings
from parseai.exceptions import FeatureDisabledException
from parseai.modules.analysis.engine import AnalysisEngine, get_engine
from parseai.modules.charts.service import ChartsService
from parseai.modules.web.extractor import WebContentExtractor


# =============================================================================
# Settings Dependencies
# =============================================================================


def get_features(settings: Annotated[Settings, Depends(get_settings)]) -> FeatureFlags:
    """Get feature flags from settings."""
    return settings.features


# =============================================================================
# Feature Flag Guards
# =============================================================================


def require_feature(feature_name: str):
    """Create a dependency that requires a specific feature to be enabled."""

    def check_feature(features: Annotated[FeatureFlags, Depends(get_features)]) -> bool:
        if not getattr(features, feature_name, False):
            raise FeatureDisabledException(feature_name)
        return True

    return check_feature


require_documents = Depends(require_feature("documents"))
require_web = Depends(require_feature("web"))
require_analysis = Depends(require_feature("analysis"))
require_charts = Depends(require_feature("charts"))


# =============================================================================
# Services
# =============================================================================


def get_analysis_engine() -> AnalysisEngine:
    """Get the application analysis engine."""
    return get_engine()


def get_extractor(settings: Annotated[Settings, Depends(get_settings)]) -> WebContentExtractor:
    """Get a web content extractor bound to the current fetch settings."""
    return WebContentExtractor(settings.fetch)


def get_charts_service() -> ChartsService:
    """Get charts service instance."""
    return ChartsService()
