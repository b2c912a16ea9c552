"""Altar pricing vertical configuration.

Loads the AltarPricingConfig from the environment once, at import of the
application entry point. Components receive the pieces they need
explicitly (cache settings, pricing settings) rather than reading this.
"""

from patterns.domain_config import AltarPricingConfig


def load_config() -> AltarPricingConfig:
    return AltarPricingConfig.from_env(prefix="ALTARS_")
