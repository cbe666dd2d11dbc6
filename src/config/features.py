"""Feature flag management."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .settings import Settings


class FeatureFlags:
    """Feature flag management system."""

    def __init__(self, settings: "Settings"):
        """Initialize with settings."""
        self.settings = settings

    @property
    def invalidation_configured(self) -> bool:
        """Check if at least one CloudFront distribution is configured."""
        return bool(self.settings.distribution_ids)

    @property
    def static_sites_enabled(self) -> bool:
        """Check if the docs and book sites are served."""
        return self.settings.enable_static_sites

    @property
    def development_features_enabled(self) -> bool:
        """Check if development features are enabled."""
        return self.settings.development_mode

    def is_feature_enabled(self, feature_name: str) -> bool:
        """Generic feature check by name."""
        feature_map = {
            "invalidation": self.invalidation_configured,
            "static_sites": self.static_sites_enabled,
            "development": self.development_features_enabled,
        }
        return feature_map.get(feature_name, False)

    def get_enabled_features(self) -> list[str]:
        """Get list of all enabled features."""
        features = []
        if self.invalidation_configured:
            features.append("invalidation")
        if self.static_sites_enabled:
            features.append("static_sites")
        if self.development_features_enabled:
            features.append("development")
        return features
