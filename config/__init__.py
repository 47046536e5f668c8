import os


def get_settings_module() -> str:
    """Pick the settings module from APP_ENV (default: development)."""
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def _env_list(name: str):
    value = os.getenv(name)
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def engine_settings(**overrides) -> dict:
    """ENGINE dict shared by all environments; unset keys fall back to WorkPolicy defaults."""
    engine = {
        "GHOST_PAIR_WINDOW_MINUTES": os.getenv("GHOST_PAIR_WINDOW_MINUTES"),
        "PERSIST_GROUP_SIZE": os.getenv("PERSIST_GROUP_SIZE"),
        "VERIFY_SAMPLE_SIZE": os.getenv("VERIFY_SAMPLE_SIZE"),
        "VERIFY_TOLERANCE_HOURS": os.getenv("VERIFY_TOLERANCE_HOURS"),
        "DIAGNOSTIC_LIMIT": os.getenv("DIAGNOSTIC_LIMIT"),
        "STANDARD_DAILY_HOURS": os.getenv("STANDARD_DAILY_HOURS"),
        "LUNCH_BREAK_MINUTES": os.getenv("LUNCH_BREAK_MINUTES"),
        "LUNCH_MIN_SPAN_HOURS": os.getenv("LUNCH_MIN_SPAN_HOURS"),
        "DINNER_BREAK_MINUTES": os.getenv("DINNER_BREAK_MINUTES"),
        "EVENING_THRESHOLD": os.getenv("EVENING_THRESHOLD"),
        "LONG_SPAN_WARNING_HOURS": os.getenv("LONG_SPAN_WARNING_HOURS"),
        "MAX_OVERNIGHT_SPAN_HOURS": os.getenv("MAX_OVERNIGHT_SPAN_HOURS"),
        "PAID_REST_WEEKLY_HOURS": os.getenv("PAID_REST_WEEKLY_HOURS"),
        "PAID_REST_DAY_HOURS": os.getenv("PAID_REST_DAY_HOURS"),
        "IGNORED_PUNCH_CATEGORIES": _env_list("IGNORED_PUNCH_CATEGORIES"),
    }
    engine.update(overrides)
    return {k: v for k, v in engine.items() if v is not None}
