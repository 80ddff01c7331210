"""
Tests for calibridge.config (TOML) and logging setup.
"""

import logging

import pytest

from calibridge import logger
from calibridge.backends.opencv import OpenCVBackend
from calibridge.backends.shared_library import SharedLibraryBackend
from calibridge.calib3d import Calib3d, Core, open_bindings
from calibridge.config import (
    BindingConfig,
    create_boundary,
    create_default_binding_config,
    load_binding_config,
    save_binding_config,
)


class TestBindingConfig:
    def test_defaults(self):
        config = create_default_binding_config()
        assert config.backend == "opencv"
        assert config.library_name == "opencvforunity"
        assert config.library_path is None
        assert config.mat_symbols == {}

    def test_frozen(self):
        config = BindingConfig()
        with pytest.raises(AttributeError):
            config.backend = "shared-library"

    def test_hashable(self):
        symbols = {"release": "core_Mat_n_1release"}
        config = BindingConfig(mat_symbols=symbols)
        assert hash(config) == hash(BindingConfig(mat_symbols=dict(symbols)))
        assert {config: "shared"}[BindingConfig(mat_symbols=symbols)] == "shared"

    def test_mat_symbols_read_only(self):
        symbols = {"release": "core_Mat_n_1release"}
        config = BindingConfig(mat_symbols=symbols)
        symbols["release"] = "changed"
        assert config.mat_symbols["release"] == "core_Mat_n_1release"
        with pytest.raises(TypeError):
            config.mat_symbols["release"] = "changed"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="backend"):
            BindingConfig(backend="jni")

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            BindingConfig(log_level="LOUD")


class TestTomlRoundtrip:
    def test_save_and_load_roundtrip(self, temp_dir):
        """Config should survive save/load cycle."""
        original = BindingConfig(
            backend="shared-library",
            library_path=str(temp_dir / "libopencvforunity.so"),
            library_name="opencvforunity",
            mat_symbols={"release": "core_Mat_n_1release"},
            log_level="DEBUG",
            log_file=str(temp_dir / "bindings.log"),
        )

        config_path = temp_dir / "nested" / "calibridge.toml"
        save_binding_config(original, config_path)
        assert config_path.exists()

        loaded = load_binding_config(config_path)
        assert loaded == original

    def test_defaults_roundtrip(self, temp_dir):
        config_path = temp_dir / "calibridge.toml"
        save_binding_config(BindingConfig(), config_path)
        assert load_binding_config(config_path) == BindingConfig()

    def test_missing_keys_use_defaults(self, temp_dir):
        config_path = temp_dir / "calibridge.toml"
        config_path.write_text('backend = "opencv"\n')
        assert load_binding_config(config_path) == BindingConfig()


class TestCreateBoundary:
    def test_opencv(self):
        assert isinstance(create_boundary(BindingConfig()), OpenCVBackend)

    def test_shared_library_missing(self, temp_dir):
        config = BindingConfig(
            backend="shared-library",
            library_path=str(temp_dir / "missing.so"),
        )
        with pytest.raises(FileNotFoundError):
            create_boundary(config)

    def test_open_bindings(self, temp_dir):
        config = BindingConfig(log_level="DEBUG", log_file=str(temp_dir / "bindings.log"))
        calib3d, core = open_bindings(config)
        assert isinstance(calib3d, Calib3d)
        assert isinstance(core, Core)
        assert calib3d.dispatcher is core.dispatcher
        assert isinstance(calib3d.dispatcher.boundary, OpenCVBackend)


class TestLogging:
    def test_get_namespaces(self):
        assert logger.get("calibridge.dispatch").name == "calibridge.dispatch"
        assert logger.get("tests").name == "calibridge.tests"

    def test_setup_replaces_handlers(self, temp_dir):
        log_file = temp_dir / "out.log"
        logger.setup_logging(logging.DEBUG, log_file)
        logger.setup_logging(logging.DEBUG, log_file)
        root = logging.getLogger("calibridge")
        assert len(root.handlers) == 2

        logger.get("tests").debug("hello")
        for handler in root.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        logger.setup_logging(logging.WARNING)
        assert len(root.handlers) == 1
