import json
import os
from datetime import date
from typing import Any, Dict, List, Optional

from beauty_studio.core.config import settings
from beauty_studio.core.logger import logger

DEFAULT_TIME_SLOTS = [f"{hour:02d}:00" for hour in range(9, 19)]


def load_studio_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads studio configuration (schedule, closed days, services, notification
    templates) from JSON.
    Raises FileNotFoundError if the file is missing, ValueError if it is not valid JSON.
    """
    config_path = path or settings.STUDIO_CONFIG_PATH
    if not os.path.exists(config_path):
        logger.critical(f"❌ Studio config '{config_path}' not found!")
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        logger.critical(f"❌ Invalid JSON in studio config: {e}")
        raise ValueError(f"Invalid JSON in config file: {e}")

    logger.debug(f"✅ Studio config loaded for: {config.get('studio_name', 'Unknown')}")
    return config


def get_time_slots(config: Dict[str, Any]) -> List[str]:
    return list(config.get("time_slots") or DEFAULT_TIME_SLOTS)


def get_service_ids(config: Dict[str, Any]) -> List[str]:
    return list(config.get("services", {}).keys())


def get_service_name(config: Dict[str, Any], service_id: str) -> str:
    service = config.get("services", {}).get(service_id)
    if not service:
        return service_id
    return service.get("name", service_id)


def get_service_duration(config: Dict[str, Any], service_id: str) -> Optional[int]:
    return config.get("services", {}).get(service_id, {}).get("duration_minutes")


def is_closed_day(config: Dict[str, Any], day: date) -> bool:
    """Weekly closed day (weekday numbers, Monday=0) or annual holiday (MM-DD)."""
    if day.weekday() in config.get("closed_weekdays", []):
        return True
    return day.strftime("%m-%d") in config.get("holidays", [])
