# tests/test_config.py
from app.core.config import Settings


def test_cors_origins_from_json_array():
    s = Settings(CORS_ORIGINS='[" https://a.example ", "https://b.example"]')
    assert s.CORS_ORIGINS == ["https://a.example", "https://b.example"]


def test_cors_origins_from_comma_list():
    s = Settings(CORS_ORIGINS="https://a.example, ,https://b.example")
    assert s.CORS_ORIGINS == ["https://a.example", "https://b.example"]
