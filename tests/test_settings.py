from nexacrm.core.settings import Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "NexaCRM"
    assert settings.environment == "development"
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60
    assert isinstance(settings.secret_key, str) and settings.secret_key
    assert isinstance(settings.database_url, str) and settings.database_url


def test_settings_read_from_environment():
    settings = get_settings()
    assert settings.database_url == "sqlite:///./test_nexacrm.db"
    assert settings.secret_key == "test-secret"
    assert not settings.firecrawl_api_key


def test_owner_email_and_cors_origins_are_normalized():
    settings = Settings(OWNER_EMAIL="  Boss@Example.COM ", CORS_ORIGINS="http://a.test, http://b.test,")
    assert settings.normalized_owner_email == "boss@example.com"
    assert settings.cors_origin_list == ["http://a.test", "http://b.test"]
