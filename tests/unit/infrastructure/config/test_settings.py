import os
import pytest
from pathlib import Path

from dircontacts.domain.errors import ConfigurationError
from dircontacts.infrastructure.config import settings
from dircontacts.infrastructure.config.settings import (
    env_var_name, get_batch_size, get_config, get_fetch_timeout, get_group_id,
    get_max_concurrent_batches, get_max_members, get_quota_policy,
    get_request_pacing, get_sentinel, get_token_file, load_configuration,
    set_config_for_testing,
)

@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "contacts:\n"
        "  batch_size: 25\n"
        "  group_id: contactGroups/friends\n"
        "quota:\n"
        "  max_retries: 5\n"
        "  backoff_factor: 2\n"
    )
    return path

@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    """Loads configuration from nothing but what each test provides."""
    monkeypatch.chdir(tmp_path)
    for key in ("contacts.batch_size", "contacts.group_id", "quota.max_retries", "fetch.timeout_seconds"):
        monkeypatch.delenv(env_var_name(key), raising=False)
    yield
    load_configuration(config_file=tmp_path / "missing.yaml", force=True)

def test_env_var_name():
    assert env_var_name("quota.max_retries") == "DIRCONTACTS_QUOTA_MAX_RETRIES"

def test_defaults(isolated_config, tmp_path):
    load_configuration(config_file=tmp_path / "missing.yaml", force=True)
    assert get_group_id() == "contactGroups/all"
    assert get_max_members() == 10000
    assert get_batch_size() == 50
    assert get_max_concurrent_batches() == 16
    assert get_sentinel() == "me"
    assert get_fetch_timeout() is None
    assert get_request_pacing() == {'max_requests': None, 'time_window': 60.0}
    policy = get_quota_policy()
    assert policy.marker == "quota"
    assert policy.initial_delay_s == 1.0
    assert policy.backoff_factor == 1.0
    assert policy.max_retries is None

def test_yaml_is_flattened(isolated_config, config_file):
    load_configuration(config_file=config_file, force=True)
    assert get_batch_size() == 25
    assert get_group_id() == "contactGroups/friends"
    policy = get_quota_policy()
    assert policy.max_retries == 5
    assert policy.backoff_factor == 2.0

def test_env_overrides_yaml(isolated_config, config_file, monkeypatch):
    load_configuration(config_file=config_file, force=True)
    monkeypatch.setenv("DIRCONTACTS_CONTACTS_BATCH_SIZE", "10")
    monkeypatch.setenv("DIRCONTACTS_FETCH_TIMEOUT_SECONDS", "2.5")
    assert get_batch_size() == 10
    assert get_fetch_timeout() == 2.5

def test_dotenv_file_is_loaded(isolated_config, tmp_path):
    (tmp_path / ".env").write_text("DIRCONTACTS_CONTACTS_GROUP_ID=contactGroups/family\n")
    try:
        load_configuration(config_file=tmp_path / "missing.yaml", force=True)
        assert get_group_id() == "contactGroups/family"
    finally:
        os.environ.pop("DIRCONTACTS_CONTACTS_GROUP_ID", None)

def test_test_config_has_highest_priority(isolated_config, monkeypatch):
    monkeypatch.setenv("DIRCONTACTS_CONTACTS_BATCH_SIZE", "10")
    set_config_for_testing({'contacts.batch_size': 7})
    assert get_batch_size() == 7

def test_env_values_are_coerced(monkeypatch):
    monkeypatch.setenv("DIRCONTACTS_SOME_FLAG", "true")
    monkeypatch.setenv("DIRCONTACTS_SOME_NUMBER", "3")
    assert get_config("some.flag") is True
    assert get_config("some.number") == 3

@pytest.mark.parametrize("value", ["lots", 0, -5])
def test_invalid_batch_size(value):
    set_config_for_testing({'contacts.batch_size': value})
    with pytest.raises(ConfigurationError):
        get_batch_size()

def test_invalid_yaml_raises(isolated_config, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("contacts: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_configuration(config_file=bad, force=True)

def test_token_file_expands_user():
    set_config_for_testing({'google.token_file': "~/tokens/people.json"})
    assert get_token_file() == Path.home() / "tokens" / "people.json"

def test_load_is_idempotent_without_force(isolated_config, config_file, tmp_path):
    load_configuration(config_file=config_file, force=True)
    load_configuration(config_file=tmp_path / "missing.yaml")
    assert settings._config['contacts.batch_size'] == 25
