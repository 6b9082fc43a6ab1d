import os

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
    "dev": "development",
    "development": "development",
}


def get_settings_module() -> str:
    # EVENT_ROSTER_SETTINGS trỏ thẳng tới một module cấu hình tuỳ chỉnh
    explicit = os.getenv("EVENT_ROSTER_SETTINGS", "").strip()
    if explicit:
        return explicit

    # APP_ENV chọn module cấu hình, mặc định là 'development'
    env = os.getenv("APP_ENV", "development").strip().lower()
    return f"config.{_ALIASES.get(env, 'development')}"
