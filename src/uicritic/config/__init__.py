from .settings import IntakeMode, Settings, get_settings

__all__ = ["IntakeMode", "Settings", "get_settings"]
