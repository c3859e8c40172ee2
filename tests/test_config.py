"""Configuration loading."""

from webstir_host.config import load_config


class TestLoadConfig:
    """YAML file, .env file and environment variables."""

    def test_defaults_without_files(self, workspace):
        config = load_config(workspace)

        assert config.test_runtime is None
        assert config.layout.src_folder == "src"
        assert config.layout.test_suffixes == [".test.ts", ".test.js"]
        assert config.langfuse.enabled is False

    def test_yaml_under_webstir_key(self, workspace):
        (workspace / "webstir.yaml").write_text(
            "webstir:\n"
            "  test_runtime: frontend\n"
            "  layout:\n"
            "    build_folder: out\n"
        )

        config = load_config(workspace)

        assert config.test_runtime == "frontend"
        assert config.layout.build_folder == "out"
        assert config.layout.src_folder == "src"

    def test_environment_overrides_yaml(self, workspace, monkeypatch):
        (workspace / "webstir.yml").write_text("test_runtime: frontend\n")
        monkeypatch.setenv("WEBSTIR_TEST_RUNTIME", "backend")

        assert load_config(workspace).test_runtime == "backend"

    def test_dotenv_file_is_loaded(self, workspace, monkeypatch):
        # Registers the variable with monkeypatch so teardown removes what load_dotenv sets.
        monkeypatch.setenv("WEBSTIR_TEST_RUNTIME", "unset")
        monkeypatch.delenv("WEBSTIR_TEST_RUNTIME")
        (workspace / ".env").write_text("WEBSTIR_TEST_RUNTIME=backend\n")

        assert load_config(workspace).test_runtime == "backend"
