"""
Configuration management for PaceLine.
Centralizes environment variables and engine defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .logging_config import get_logger

logger = get_logger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class AppConfig:
    """General application configuration."""
    log_level: str = "INFO"
    log_to_file: bool = False
    max_file_size_mb: int = 10
    supported_file_types: List[str] = field(default_factory=lambda: ['gpx'])

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class PacingConfig:
    """Segment and checkpoint planning defaults."""
    default_start_time: str = "06:00"
    default_effort_level: str = "tempo"
    safe_margin_minutes: int = 60
    caution_margin_minutes: int = 30


@dataclass
class PerformanceConfig:
    """Athlete and equipment defaults for the power model."""
    default_altitude_adjustment: float = 0.20
    default_gear_weight_kg: float = 9.0
    default_discipline: str = "gravel"
    default_surface: str = "gravel"
    default_position: str = "hoods"


@dataclass
class NutritionConfig:
    """Per-hour fueling defaults."""
    default_cho_per_hour: int = 90
    default_hydration_ml_per_hour: int = 750
    default_sodium_mg_per_hour: int = 750


class ConfigManager:
    """Centralized configuration manager for PaceLine."""
    
    def __init__(self):
        logger.debug("Initializing configuration manager")
        self._app_config = None
        self._pacing_config = None
        self._performance_config = None
        self._nutrition_config = None
        
        self._load_configurations()
    
    def _load_configurations(self):
        """Load all configuration sections."""
        try:
            self._app_config = self._load_app_config()
            self._pacing_config = self._load_pacing_config()
            self._performance_config = self._load_performance_config()
            self._nutrition_config = self._load_nutrition_config()
            
            logger.debug("All configurations loaded successfully")
            
        except ValueError as e:
            logger.error(f"Error loading configurations: {e}")
            raise
    
    def _load_app_config(self) -> AppConfig:
        config = AppConfig(
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_to_file=_env_bool("LOG_TO_FILE", "false"),
            max_file_size_mb=int(os.environ.get("MAX_FILE_SIZE_MB", "10")),
        )
        
        logger.debug(f"App config loaded - Log level: {config.log_level}")
        return config
    
    def _load_pacing_config(self) -> PacingConfig:
        config = PacingConfig(
            default_start_time=os.environ.get("DEFAULT_START_TIME", "06:00"),
            default_effort_level=os.environ.get("DEFAULT_EFFORT_LEVEL", "tempo"),
            safe_margin_minutes=int(os.environ.get("SAFE_MARGIN_MINUTES", "60")),
            caution_margin_minutes=int(os.environ.get("CAUTION_MARGIN_MINUTES", "30")),
        )
        
        logger.debug(f"Pacing config loaded - Start time: {config.default_start_time}")
        return config
    
    def _load_performance_config(self) -> PerformanceConfig:
        config = PerformanceConfig(
            default_altitude_adjustment=float(os.environ.get("DEFAULT_ALTITUDE_ADJUSTMENT", "0.20")),
            default_gear_weight_kg=float(os.environ.get("DEFAULT_GEAR_WEIGHT", "9.0")),
            default_discipline=os.environ.get("DEFAULT_DISCIPLINE", "gravel"),
            default_surface=os.environ.get("DEFAULT_SURFACE", "gravel"),
            default_position=os.environ.get("DEFAULT_POSITION", "hoods"),
        )
        
        logger.debug(f"Performance config loaded - Discipline: {config.default_discipline}")
        return config
    
    def _load_nutrition_config(self) -> NutritionConfig:
        config = NutritionConfig(
            default_cho_per_hour=int(os.environ.get("DEFAULT_CHO_PER_HOUR", "90")),
            default_hydration_ml_per_hour=int(os.environ.get("DEFAULT_HYDRATION_ML_PER_HOUR", "750")),
            default_sodium_mg_per_hour=int(os.environ.get("DEFAULT_SODIUM_MG_PER_HOUR", "750")),
        )
        
        logger.debug(f"Nutrition config loaded - CHO/hr: {config.default_cho_per_hour}g")
        return config
    
    @property
    def app(self) -> AppConfig:
        """Get application configuration."""
        return self._app_config
    
    @property
    def pacing(self) -> PacingConfig:
        """Get pacing configuration."""
        return self._pacing_config
    
    @property
    def performance(self) -> PerformanceConfig:
        """Get performance configuration."""
        return self._performance_config
    
    @property
    def nutrition(self) -> NutritionConfig:
        """Get nutrition configuration."""
        return self._nutrition_config
    
    def get_environment_info(self) -> Dict[str, Any]:
        """Get environment information for debugging."""
        return {
            "log_level": self._app_config.log_level,
            "max_file_size_mb": self._app_config.max_file_size_mb,
            "default_start_time": self._pacing_config.default_start_time,
            "default_discipline": self._performance_config.default_discipline,
        }
    
    def validate_configuration(self) -> Dict[str, bool]:
        """Validate all configuration sections."""
        from .calibration import DEFAULT_CALIBRATION
        
        validation_results = {}
        
        validation_results["valid_log_level"] = self._app_config.log_level in VALID_LOG_LEVELS
        validation_results["valid_max_file_size"] = self._app_config.max_file_size_mb > 0
        
        validation_results["valid_effort_level"] = (
            self._pacing_config.default_effort_level in DEFAULT_CALIBRATION.intensity_factors
        )
        validation_results["valid_margin_order"] = (
            self._pacing_config.safe_margin_minutes > self._pacing_config.caution_margin_minutes
        )
        
        perf = self._performance_config
        validation_results["valid_altitude_adjustment"] = 0 <= perf.default_altitude_adjustment < 1
        validation_results["valid_discipline"] = perf.default_discipline in DEFAULT_CALIBRATION.discipline_multipliers
        validation_results["valid_surface"] = perf.default_surface in DEFAULT_CALIBRATION.rolling_resistance
        validation_results["valid_position"] = perf.default_position in DEFAULT_CALIBRATION.drag_area
        
        passed = sum(validation_results.values())
        logger.info(f"Configuration validation completed: {passed}/{len(validation_results)} checks passed")
        
        return validation_results


# Global configuration instance
config_manager = ConfigManager()


def get_config() -> ConfigManager:
    """Get the global configuration manager instance."""
    return config_manager
