import pytest

from cospress.core.config import CosConfig, load_cos_config
from cospress.core.errors import ConfigurationMissing


def _write_env(tmp_path, text: str):
    path = tmp_path / ".env"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_cos_config_reads_env_file(tmp_path):
    path = _write_env(
        tmp_path,
        "TENCENT_SECRET_ID=AKIDexample\n"
        "TENCENT_SECRET_KEY=secret\n"
        "COS_BUCKET= press-1250000000\n"
        "COS_REGION=ap-guangzhou\n"
        "COS_PREFIX=blog/\n"
        "COS_CDN_DOMAIN=cdn.example.com\n"
        "EDITOR_THEME=dark\n",
    )
    config = load_cos_config(path)

    assert config.secret_id == "AKIDexample"
    assert config.secret_key.get_secret_value() == "secret"
    assert config.bucket == "press-1250000000"
    assert config.region == "ap-guangzhou"
    assert config.prefix == "blog/"
    assert config.cdn_domain == "cdn.example.com"
    assert config.is_complete()


def test_prefix_defaults_to_press(tmp_path):
    config = load_cos_config(_write_env(tmp_path, "COS_BUCKET=b\n"))
    assert config.prefix == "press/"
    assert config.missing_fields() == ["secret_id", "secret_key", "region"]


def test_process_environment_does_not_leak_in(tmp_path, monkeypatch):
    monkeypatch.setenv("TENCENT_SECRET_KEY", "from-process-env")
    config = load_cos_config(_write_env(tmp_path, "COS_BUCKET=b\n"))
    assert config.secret_key.get_secret_value() == ""


def test_file_is_reread_on_every_call(tmp_path):
    path = _write_env(tmp_path, "COS_REGION=ap-guangzhou\n")
    assert load_cos_config(path).region == "ap-guangzhou"
    path.write_text("COS_REGION=ap-shanghai\n", encoding="utf-8")
    assert load_cos_config(path).region == "ap-shanghai"


def test_missing_env_file(tmp_path):
    with pytest.raises(ConfigurationMissing) as excinfo:
        load_cos_config(tmp_path / "absent.env")
    assert "Could not read .env file" in excinfo.value.message


def test_secret_not_in_repr():
    config = CosConfig(secret_id="AKIDexample", secret_key="supersecret", bucket="b", region="r")
    assert "supersecret" not in repr(config)
    assert "supersecret" not in str(config.model_dump())


def test_require_complete_lists_missing_fields():
    with pytest.raises(ConfigurationMissing) as excinfo:
        CosConfig(secret_id="AKIDexample", bucket="b").require_complete()
    assert excinfo.value.fields == ["secret_key", "region"]
    assert excinfo.value.status_code == 503


@pytest.mark.parametrize(
    "field, value",
    [("bucket", "bad bucket"), ("bucket", "Press-125"), ("region", "ap guangzhou"), ("region", "ap-guangzhou/x")],
)
def test_require_complete_rejects_non_hostname_bucket_or_region(field, value):
    values = {"secret_id": "AKIDexample", "secret_key": "secret", "bucket": "press-1250000000", "region": "ap-guangzhou"}
    config = CosConfig(**{**values, field: value})

    assert config.invalid_fields() == [field]
    assert not config.is_complete()
    with pytest.raises(ConfigurationMissing) as excinfo:
        config.require_complete()
    assert excinfo.value.fields == [field]
    assert "invalid" in excinfo.value.message
